from argparse import ArgumentParser
from typing import Optional

from pbxgraft.config import Options
from pbxgraft.descriptor import ProjectDescriptor
from pbxgraft.details.workspace import Workspace
from pbxgraft.errors import GraphIntegrityError, IOFailure
from pbxgraft.pipeline import default_pipeline


def apply_main(
    workspace: Workspace, options: Options, command_args: list[str]
) -> Optional[int]:
    parser = ArgumentParser(prog="pbxgraft apply")
    parser.add_argument("--dry-run", action="store_true", help="report without writing")
    args = parser.parse_args(command_args)
    try:
        descriptor = ProjectDescriptor.load(options)
    except (GraphIntegrityError, IOFailure) as e:
        print(f"[load] failed: {e}")
        print("pipeline: failed")
        return 1
    report = default_pipeline().run(descriptor, options, write=not args.dry_run)
    for line in report.lines():
        print(line)
    return 0 if report.ok else 1
