"""Flags and helpers shared by the kw-airgap commands."""

from argparse import ArgumentParser, BooleanOptionalAction
import pathlib
from typing import Any

from kw_airgap.config import AirgapConfig
from kw_airgap.manifest import DependencyManifest, read_manifest
from kw_airgap.transport import Tools, check_requirements


def add_list_flag(args: ArgumentParser) -> None:
    """Add the flag naming the manifest file."""
    args.add_argument(
        "--list",
        "-l",
        dest="manifest_file",
        type=pathlib.Path,
        required=True,
        help="JSON file with the list of required dependencies",
    )


def add_registry_flags(args: ArgumentParser) -> None:
    """Add the flags selecting the private registry."""
    args.add_argument(
        "--registry",
        "-r",
        type=str,
        required=True,
        help="Private registry host[:port] where artifacts are pushed",
    )
    args.add_argument(
        "--insecure",
        "-k",
        default=False,
        action=BooleanOptionalAction,
        help="Allow the private registry to be used without TLS verification",
    )


def add_cache_flags(args: ArgumentParser) -> None:
    """Add the flags controlling local archives and dry runs."""
    args.add_argument(
        "--cache-dir",
        type=pathlib.Path,
        default=pathlib.Path("."),
        help="Directory holding the archives and chart files",
    )
    args.add_argument(
        "--dry",
        "-d",
        dest="dry_run",
        default=False,
        action=BooleanOptionalAction,
        help="Do not perform actions, only print commands that would be executed",
    )


def build_config(**kwargs: Any) -> AirgapConfig:
    """Build the pipeline configuration from CLI arguments."""
    return AirgapConfig(
        registry=kwargs.get("registry"),
        insecure=kwargs.get("insecure", False),
        dry_run=kwargs.get("dry_run", False),
        cache_dir=kwargs.get("cache_dir") or pathlib.Path("."),
    )


async def load(**kwargs: Any) -> tuple[DependencyManifest, AirgapConfig, Tools]:
    """Read the manifest and create the collaborators for a command."""
    config = build_config(**kwargs)
    manifest = await read_manifest(kwargs["manifest_file"])
    tools = Tools.create(dry_run=config.dry_run)
    if not config.dry_run:
        check_requirements(tools.binaries)
    return manifest, config, tools
