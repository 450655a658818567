"""Pulls the artifacts of a manifest into local archives.

Images and policies are bundled into one archive per category. The archive is
the only idempotency marker: when it exists the whole category is skipped.
Charts are pulled one file per chart version and skipped per file.

Every fetch failure aborts the pull. An archive is written under a temporary
name and only renamed into place once it is complete, so an interrupted run
never leaves behind a file that a later run would mistake for a finished
archive.
"""

import logging
from pathlib import Path
from collections.abc import Awaitable, Callable

from aiofiles.os import makedirs, remove, replace
from aiofiles.ospath import exists

from .config import AirgapConfig
from .context import step
from .manifest import DependencyManifest
from .reference import parse_policy
from .transport import Tools

__all__ = [
    "pull_manifest",
]

_LOGGER = logging.getLogger(__name__)

PARTIAL_SUFFIX = ".partial"


async def _skip_existing(path: Path) -> bool:
    if await exists(path):
        _LOGGER.info("File %s exists, skipping.", path.name)
        return True
    return False


async def _save_archive(
    save: Callable[[list[str], Path], Awaitable[None]],
    entries: list[str],
    archive: Path,
    config: AirgapConfig,
) -> None:
    """Bundle the entries into the archive, committing it only on success."""
    if config.dry_run:
        await save(entries, archive)
        return
    _LOGGER.info("Create %s from pulled artifacts", archive.name)
    partial = archive.with_name(archive.name + PARTIAL_SUFFIX)
    try:
        await save(entries, partial)
        await replace(partial, archive)
    finally:
        if await exists(partial):
            await remove(partial)


async def pull_images(
    manifest: DependencyManifest, config: AirgapConfig, tools: Tools
) -> None:
    """Pull every image and save them into the images archive."""
    if await _skip_existing(config.images_archive):
        return
    for image in manifest.images:
        await tools.images.pull(image)
    await _save_archive(
        tools.images.save, list(manifest.images), config.images_archive, config
    )


async def pull_policies(
    manifest: DependencyManifest, config: AirgapConfig, tools: Tools
) -> None:
    """Pull every policy and save them into the policies archive."""
    if await _skip_existing(config.policies_archive):
        return
    for policy in manifest.policies:
        _LOGGER.info("Pulling policy %s", policy)
        await tools.policies.pull(policy)
    await _save_archive(
        tools.policies.save, list(manifest.policies), config.policies_archive, config
    )


async def pull_charts(
    manifest: DependencyManifest, config: AirgapConfig, tools: Tools
) -> None:
    """Pull each chart version into its own file."""
    for ref in manifest.chart_references():
        if await _skip_existing(config.chart_path(ref)):
            continue
        _LOGGER.info("Pulling chart %s", ref)
        await tools.charts.pull(
            ref.authority or "", ref.name, ref.version or "", config.cache_dir
        )


async def pull_manifest(
    manifest: DependencyManifest, config: AirgapConfig, tools: Tools
) -> None:
    """Pull images, policies and charts of the manifest into the cache directory."""
    # Validate every chart and policy reference before fetching anything
    manifest.chart_references()
    for policy in manifest.policies:
        parse_policy(policy)
    if not config.dry_run:
        await makedirs(config.cache_dir, exist_ok=True)
    if manifest.images:
        with step("Pull images"):
            await pull_images(manifest, config, tools)
    if manifest.policies:
        with step("Pull policies"):
            await pull_policies(manifest, config, tools)
    if manifest.charts:
        with step("Pull charts"):
            await pull_charts(manifest, config, tools)
