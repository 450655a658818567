"""Builds the dependency manifest for the currently published platform release.

The platform charts are discovered from the locally configured helm
repository and the image and policy lists come from text files published as
assets of the matching defaults chart release. Any discovery failure fails the
whole build; a partial manifest is never returned.
"""

import logging
from typing import Any

import yaml

from .config import PlatformConfig
from .context import step
from .exceptions import DiscoveryError
from .manifest import DependencyManifest
from .transport import ChartEntry, ReleaseAsset, Tools

__all__ = [
    "build_manifest",
    "extract_images",
    "parse_listing",
]

_LOGGER = logging.getLogger(__name__)

IMAGE_KEY = "image"


def parse_listing(content: str) -> list[str]:
    """Split a line oriented listing into its non-empty lines."""
    return [line.strip() for line in content.splitlines() if line.strip()]


def _extract_images(doc: Any) -> list[str]:
    """Extract every `image` value of a rendered object in document order."""
    images: list[str] = []
    if isinstance(doc, dict):
        for key, value in doc.items():
            if key == IMAGE_KEY:
                if not isinstance(value, str):
                    raise DiscoveryError(
                        f"Expected string for image key '{IMAGE_KEY}', got type "
                        f"{type(value).__name__}: {value}"
                    )
                images.append(value)
            else:
                images.extend(_extract_images(value))
    elif isinstance(doc, list):
        for item in doc:
            images.extend(_extract_images(item))
    return images


def extract_images(content: str) -> list[str]:
    """Return the images referenced by a rendered YAML stream."""
    try:
        docs = list(yaml.safe_load_all(content))
    except yaml.YAMLError as err:
        raise DiscoveryError(f"Unable to parse rendered chart: {err}") from err
    return [image for doc in docs for image in _extract_images(doc)]


def _find_asset(assets: list[ReleaseAsset], suffix: str, tag: str) -> ReleaseAsset:
    for asset in assets:
        if asset.url.endswith(suffix):
            return asset
    raise DiscoveryError(f"Release {tag} has no asset ending with '{suffix}'")


async def _resolve_defaults_version(tools: Tools, platform: PlatformConfig) -> str:
    """Return the version of the defaults chart in the local repository index."""
    name = f"{platform.repo_name}/{platform.defaults_chart}"
    entries = await tools.charts.search(name)
    for entry in entries:
        if entry.name == name:
            return entry.version
    raise DiscoveryError(f"Chart {name} not found in the local helm repository index")


async def _fetch_listing(
    tools: Tools, assets: list[ReleaseAsset], suffix: str, tag: str
) -> list[str]:
    asset = _find_asset(assets, suffix, tag)
    lines = parse_listing(await tools.releases.fetch_text(asset.url))
    if not lines:
        raise DiscoveryError(f"Release asset {asset.url} is empty")
    _LOGGER.debug("Asset %s lists %d entries", asset.url, len(lines))
    return lines


async def _platform_charts(
    tools: Tools, platform: PlatformConfig, repo_url: str
) -> list[str]:
    """Return the references of every chart published in the platform repository."""
    prefix = f"{platform.repo_name}/"
    entries: list[ChartEntry] = [
        entry
        for entry in await tools.charts.search(platform.repo_name)
        if entry.name.startswith(prefix)
    ]
    if not entries:
        raise DiscoveryError(f"No charts found in helm repository {platform.repo_name}")
    return [
        f"{repo_url.rstrip('/')}/{entry.chart_name}:{entry.version}"
        for entry in entries
    ]


async def build_manifest(
    tools: Tools,
    platform: PlatformConfig | None = None,
    include_cert_manager: bool = False,
) -> DependencyManifest:
    """Discover the artifacts required by the current platform release."""
    if platform is None:
        platform = PlatformConfig()

    if not (repo_url := await tools.charts.repo_url(platform.repo_name)):
        raise DiscoveryError(f"Missing {platform.repo_name} repo")

    with step("Resolve release"):
        version = await _resolve_defaults_version(tools, platform)
        tag = platform.release_tag(version)
        _LOGGER.info("Using release %s", tag)
        assets = await tools.releases.list_assets(tag)

    with step("List images"):
        images = await _fetch_listing(
            tools, assets, platform.images_asset_suffix, tag
        )
        if include_cert_manager:
            cert_manager = platform.cert_manager
            rendered = await tools.charts.template(
                cert_manager.repo_url, cert_manager.chart, cert_manager.version
            )
            if not (cert_manager_images := extract_images(rendered)):
                raise DiscoveryError(
                    f"No images found in chart {cert_manager.chart_reference}"
                )
            images.extend(cert_manager_images)

    with step("List policies"):
        policies = await _fetch_listing(
            tools, assets, platform.policies_asset_suffix, tag
        )

    with step("List charts"):
        charts = await _platform_charts(tools, platform, repo_url)
        if include_cert_manager:
            charts.append(platform.cert_manager.chart_reference)

    manifest = DependencyManifest(
        images=tuple(images), policies=tuple(policies), charts=tuple(charts)
    )
    if missing := manifest.missing_charts(platform):
        raise DiscoveryError(
            f"Helm repository {platform.repo_name} is missing charts: {', '.join(missing)}"
        )
    return manifest
