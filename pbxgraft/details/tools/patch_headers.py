from argparse import ArgumentParser
from pathlib import Path
from typing import Optional

from pbxgraft.config import Options
from pbxgraft.details.workspace import Workspace
from pbxgraft.errors import IOFailure
from pbxgraft.headers import patch_folly_headers


def patch_headers_main(
    workspace: Optional[Workspace], options: Optional[Options], command_args: list[str]
) -> Optional[int]:
    parser = ArgumentParser(prog="pbxgraft patch-headers")
    parser.add_argument("--pods", type=str, default=None)
    parser.add_argument("--deployment-target", type=str, default=None)
    args = parser.parse_args(command_args)

    if args.pods:
        pods_dir = Path(args.pods)
    elif options is not None:
        pods_dir = Path(options.platform_root) / "Pods"
    else:
        parser.error("--pods is required without --config")
    deployment_target = args.deployment_target or (options and options.deployment_target)
    if not deployment_target:
        parser.error("--deployment-target is required without --config")

    if not pods_dir.is_dir():
        print(f"[patch-headers] skipped: Pods directory not found at {pods_dir}")
        return 0
    try:
        patched = patch_folly_headers(pods_dir, deployment_target)
    except IOFailure as e:
        print(f"[patch-headers] failed: {e}")
        return 1
    for header in patched:
        print(f"[patch-headers] patched {header}")
    if not patched:
        print("[patch-headers] already-applied: no Time.h updates were required")
    return 0
