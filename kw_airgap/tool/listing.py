"""Kw-airgap list action."""

import logging
from argparse import (
    ArgumentParser,
    BooleanOptionalAction,
    _SubParsersAction as SubParsersAction,
)
import pathlib
from typing import cast

from kw_airgap.builder import build_manifest
from kw_airgap.config import PlatformConfig
from kw_airgap.manifest import write_manifest
from kw_airgap.transport import Tools, check_requirements

_LOGGER = logging.getLogger(__name__)


class ListAction:
    """Generate the list of dependencies required by an air-gapped install."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "list",
                help="Generate JSON list of dependencies",
                description=(
                    "Generate the JSON list of images, policies and charts of the "
                    "current release. Save it to a file for the other commands."
                ),
            ),
        )
        args.add_argument(
            "--cert-manager",
            "-c",
            default=False,
            action=BooleanOptionalAction,
            help="Include cert-manager dependencies in the generated list",
        )
        args.add_argument(
            "--output-file",
            type=str,
            default="/dev/stdout",
            help="Output file for the generated list",
        )
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        cert_manager: bool,
        output_file: str,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        platform = PlatformConfig()
        tools = Tools.create(repo=platform.release_repo)
        check_requirements([tools.charts.binary] if tools.charts.binary else [])
        manifest = await build_manifest(
            tools, platform, include_cert_manager=cert_manager
        )
        await write_manifest(pathlib.Path(output_file), manifest)
