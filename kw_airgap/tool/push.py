"""Kw-airgap push action."""

import logging
from argparse import ArgumentParser, _SubParsersAction as SubParsersAction
from typing import Any, cast

from kw_airgap.push import push_manifest

from . import common

_LOGGER = logging.getLogger(__name__)


class PushAction:
    """Push components from local archives to a private registry."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "push",
                help="Push components in list from the cache directory to a registry",
                description=(
                    "Load the image and policy archives and push every entry of the "
                    "list to the private registry."
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
        await push_manifest(manifest, config, tools)
