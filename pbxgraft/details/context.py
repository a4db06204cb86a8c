from pathlib import Path
from typing import Dict

from pbxgraft.config import Options

# Options that hold filesystem paths, resolved against the CONFIG file's directory
PATH_OPTIONS = ("platform_root", "project_path", "entitlements_path")


class OptionsContext:
    FILENAME = "CONFIG.pbxgraft"
    MODULENAME = "config"

    def __init__(self, root: Path):
        self.root = root
        self.options: Dict[str, Options] = {}

    def add_options(self, name: str, **kwargs):
        if name in self.options:
            raise RuntimeError(f"options {name} have already been registered")
        for key in PATH_OPTIONS:
            if kwargs.get(key):
                kwargs[key] = str(self.root.joinpath(kwargs[key]))
        self.options[name] = Options(**kwargs)
