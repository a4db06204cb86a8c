import sys
from typing import Optional, TextIO

from pbxgraft.config import Options
from pbxgraft.descriptor import ProjectDescriptor
from pbxgraft.details.workspace import Workspace
from pbxgraft.errors import GraphIntegrityError, IOFailure
from pbxgraft.xcode.model import XcodeProject


def write_targets(project: XcodeProject, file: TextIO):
    for target in project.native_targets:
        print(f"{target.name} ({target.productType})", file=file)
        for dependency_id in target.dependencies:
            dependency = project.get(dependency_id)
            depended = project.get(dependency.attrs.get("target")) if dependency else None
            name = depended.attrs.get("name") if depended else dependency_id
            print(f"  depends on {name}", file=file)
        for config in project.configurations_of(target):
            settings = config.buildSettings
            bundle_id = settings.get("PRODUCT_BUNDLE_IDENTIFIER", "-")
            team = settings.get("DEVELOPMENT_TEAM", "-")
            print(f"  {config.name}: bundle={bundle_id} team={team}", file=file)


def targets_main(
    workspace: Workspace, options: Options, command_args: list[str]
) -> Optional[int]:
    assert not command_args
    try:
        descriptor = ProjectDescriptor.load(options)
    except (GraphIntegrityError, IOFailure) as e:
        print(f"{e}")
        return 1
    write_targets(descriptor.project, sys.stdout)
    return 0
