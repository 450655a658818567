"""Kw-airgap install action."""

import logging
from argparse import ArgumentParser, _SubParsersAction as SubParsersAction
from typing import Any, cast

from kw_airgap.install import install_manifest

from . import common

_LOGGER = logging.getLogger(__name__)


class InstallAction:
    """Install the pulled charts configured for a private registry."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "install",
                help="Install helm charts configured with the private registry",
                description=(
                    "Install cert-manager (when listed) and the platform charts from "
                    "the pulled chart files. The registry is used for the default "
                    "registry and recommended policies setup."
                ),
            ),
        )
        common.add_list_flag(args)
        common.add_registry_flags(args)
        common.add_cache_flags(args)
        args.set_defaults(cls=cls)
        return args

    async def run(self, **kwargs: Any) -> None:
        """Async Action implementation."""
        manifest, config, tools = await common.load(**kwargs)
        await install_manifest(manifest, config, tools)
