"""Pushes the local archives into a private registry.

The manifest, not the archive contents, drives which references are pushed.
Each reference keeps its path and tag and has only its registry authority
replaced by the target registry.
"""

import logging

from aiofiles.ospath import exists

from .config import AirgapConfig
from .context import step
from .exceptions import AirgapException, MissingArchiveError, TransportError
from .manifest import DependencyManifest
from .reference import retarget_image, retarget_policy
from .transport import Tools

__all__ = [
    "push_manifest",
]

_LOGGER = logging.getLogger(__name__)


async def push_images(
    manifest: DependencyManifest, config: AirgapConfig, tools: Tools
) -> None:
    """Load the images archive and push every image to the target registry."""
    registry = config.require_registry()
    if not await exists(config.images_archive):
        raise MissingArchiveError(config.images_archive.name)
    targets = [(image, retarget_image(image, registry)) for image in manifest.images]
    await tools.images.load(config.images_archive)
    for image, target in targets:
        await tools.images.tag(image, target)
        await tools.images.push(target)


async def push_policies(
    manifest: DependencyManifest, config: AirgapConfig, tools: Tools
) -> None:
    """Load the policies archive and push every policy to the target registry."""
    registry = config.require_registry()
    if not await exists(config.policies_archive):
        raise MissingArchiveError(config.policies_archive.name)
    targets = [
        (policy, retarget_policy(policy, registry)) for policy in manifest.policies
    ]
    insecure_sources = [registry] if config.insecure else None
    _LOGGER.info("Loading archive: %s", config.policies_archive.name)
    await tools.policies.load(config.policies_archive)
    for policy, target in targets:
        _LOGGER.info("Pushing policy %s to %s", policy, target)
        await tools.policies.push(policy, target, insecure_sources=insecure_sources)


async def push_manifest(
    manifest: DependencyManifest, config: AirgapConfig, tools: Tools
) -> None:
    """Push the images and policies of the manifest to the target registry.

    A missing archive skips its category. A failure in one category does not
    prevent the next category from being attempted, but the push still fails
    once every category has been tried.
    """
    config.require_registry()
    categories = []
    if manifest.images:
        categories.append(("images", push_images))
    if manifest.policies:
        categories.append(("policies", push_policies))

    failures: list[tuple[str, AirgapException]] = []
    for name, push in categories:
        with step(f"Push {name}"):
            try:
                await push(manifest, config, tools)
            except MissingArchiveError as err:
                _LOGGER.warning("%s Skipping %s.", err, name)
            except AirgapException as err:
                _LOGGER.error("Failed to push %s: %s", name, err)
                failures.append((name, err))

    if len(failures) == 1:
        raise failures[0][1]
    if failures:
        names = ", ".join(name for name, _ in failures)
        raise TransportError(
            f"Failed to push {names}: {failures[0][1]}"
        ) from failures[0][1]
