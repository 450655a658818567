"""Kw-airgap pull action."""

import logging
from argparse import ArgumentParser, _SubParsersAction as SubParsersAction
from typing import Any, cast

from kw_airgap.pull import pull_manifest

from . import common

_LOGGER = logging.getLogger(__name__)


class PullAction:
    """Pull components from the list into local archives."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "pull",
                help="Pull components from list to the cache directory",
                description=(
                    "Pull images and policies into one archive each and pull every "
                    "chart version into its own file. Existing files are skipped."
                ),
            ),
        )
        common.add_list_flag(args)
        common.add_cache_flags(args)
        args.set_defaults(cls=cls)
        return args

    async def run(self, **kwargs: Any) -> None:
        """Async Action implementation."""
        manifest, config, tools = await common.load(**kwargs)
        await pull_manifest(manifest, config, tools)
