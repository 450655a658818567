"""Command line tool for bundling and installing an air-gapped platform."""

import argparse
import asyncio
import logging
import sys
import traceback

from kw_airgap.exceptions import AirgapException
from . import install, listing, pull, push

_LOGGER = logging.getLogger(__name__)

EPILOG = """\
examples:
  Generate list of dependencies required by airgap. Save in file for other commands:
    kw-airgap list --cert-manager --output-file file.json

  Pull images and policies and save them to archives in current directory:
    kw-airgap pull --list file.json

  Push images and policies from created archives to local registry. Run in DRY mode:
    kw-airgap push --list file.json --registry=localhost:5123 --dry

  Helm install charts from local files. Registry is used for recommendedPolicies setup:
    kw-airgap install --list file.json --registry 172.18.0.4:5000

requirements: helm, kwctl, docker and the kubewarden helm repository
"""


def _make_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Command line utility for moving the platform into an air-gapped cluster.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="INFO",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command", required=True)

    listing.ListAction.register(subparsers)
    pull.PullAction.register(subparsers)
    push.PushAction.register(subparsers)
    install.InstallAction.register(subparsers)
    return parser


def main() -> None:
    """Kw-airgap command line tool main entry point."""
    parser = _make_parser()
    args = parser.parse_args()

    logging.basicConfig(level=args.log_level)

    action = args.cls()
    try:
        asyncio.run(action.run(**vars(args)))
    except AirgapException as err:
        if args.log_level == "DEBUG":
            traceback.print_exc(file=sys.stderr)
        print("kw-airgap error: ", err, file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
