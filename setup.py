#!/usr/bin/env python

from setuptools import setup

setup(
    name="pbxgraft",
    version="0.1.0",
    packages=[
        "pbxgraft",
        "pbxgraft.details",
        "pbxgraft.details.tools",
        "pbxgraft.transforms",
        "pbxgraft.xcode",
    ],
    python_requires=">=3.9",
    extras_require={"test": ["pytest"]},
    entry_points={"console_scripts": ["pbxgraft = pbxgraft.__main__:main"]},
)
