from argparse import ArgumentParser
import sys

from pbxgraft.details.tools.apply import apply_main
from pbxgraft.details.tools.patch_headers import patch_headers_main
from pbxgraft.details.tools.targets import targets_main
from pbxgraft.details.tools.validate import validate_main
from pbxgraft.details.workspace import Workspace


def main(argv=None):
    COMMANDS = {
        "apply": apply_main,
        "patch-headers": patch_headers_main,
        "targets": targets_main,
        "validate": validate_main,
    }
    # patch-headers is run from the Podfile hook, where no CONFIG file may be around
    STANDALONE_COMMANDS = {"patch-headers"}
    # parse common arguments...
    parser = ArgumentParser(prog="pbxgraft")
    parser.add_argument("command", choices=COMMANDS.keys())
    parser.add_argument("--config", type=str, default=None)
    parser.add_argument("--root", type=str, default=".")
    args, unknown_args = parser.parse_known_args(sys.argv[1:] if argv is None else argv)
    # load workspace options...
    workspace = None
    options = None
    if args.config:
        workspace = Workspace(args.root)
        options = workspace.get_options(args.config)
    elif args.command not in STANDALONE_COMMANDS:
        parser.error(f"--config is required for {args.command}")
    exit_code = COMMANDS[args.command](
        workspace=workspace,
        options=options,
        command_args=unknown_args,
    )
    if exit_code is not None:
        sys.exit(exit_code)


if __name__ == "__main__":
    main()
