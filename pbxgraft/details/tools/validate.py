from typing import Optional

from pbxgraft.config import Options
from pbxgraft.descriptor import ProjectDescriptor
from pbxgraft.details.workspace import Workspace
from pbxgraft.errors import GraphIntegrityError, IOFailure
from pbxgraft.xcode.validator import validate_project


def validate_main(
    workspace: Workspace, options: Options, command_args: list[str]
) -> Optional[int]:
    assert not command_args
    try:
        descriptor = ProjectDescriptor.load(options)
    except (GraphIntegrityError, IOFailure) as e:
        print(f"{e}")
        return 1
    errors = validate_project(descriptor.project)
    for error in errors:
        print(error)
    objects = len(descriptor.project.objects)
    print(f"{descriptor.project_path}: {objects} objects, {len(errors)} errors")
    return 1 if errors else 0
