"""Representation of the dependencies needed by an air-gapped installation.

A manifest is built from the currently published platform release (see
`kw_airgap.builder`) and serialized to a JSON file so it can be reviewed,
edited and carried along with the archives:

```json
{
  "images": ["ghcr.io/kubewarden/kubewarden-controller:v1.2.8"],
  "policies": ["registry://ghcr.io/kubewarden/policies/safe-labels:v0.1.1"],
  "charts": ["https://charts.kubewarden.io/kubewarden-crds:1.2.3"]
}
```

The manifest is read only input to the pull, push and install phases.
"""

from dataclasses import dataclass, field
import json
import logging
from pathlib import Path
from typing import Any

import aiofiles
from mashumaro import DataClassDictMixin
from mashumaro.exceptions import MissingField, InvalidFieldValue

from .config import PlatformConfig
from .exceptions import InvalidManifestError
from .reference import Reference, parse_chart

__all__ = [
    "read_manifest",
    "write_manifest",
    "parse_manifest",
    "DependencyManifest",
]

_LOGGER = logging.getLogger(__name__)

CERT_MANAGER_CHART = "cert-manager"
CATEGORIES = ("images", "policies", "charts")


@dataclass(frozen=True)
class DependencyManifest(DataClassDictMixin):
    """Images, policies and charts needed for one air-gapped install."""

    images: tuple[str, ...] = field(default_factory=tuple)
    """Image references in discovery order."""

    policies: tuple[str, ...] = field(default_factory=tuple)
    """Policy URIs e.g. `registry://ghcr.io/kubewarden/policies/pod-privileged:v0.2.2`."""

    charts: tuple[str, ...] = field(default_factory=tuple)
    """Chart references of the form `repoURL/chartName:version`."""

    def chart_references(self) -> list[Reference]:
        """Return every chart entry parsed."""
        return [parse_chart(chart) for chart in self.charts]

    @property
    def includes_cert_manager(self) -> bool:
        """Return True if cert-manager is part of this installation."""
        return any(ref.name == CERT_MANAGER_CHART for ref in self.chart_references())

    def find_chart(self, name: str) -> Reference:
        """Return the one chart reference with the given chart name."""
        refs = [ref for ref in self.chart_references() if ref.name == name]
        if not refs:
            raise InvalidManifestError(f"Manifest is missing required chart '{name}'")
        if len(refs) > 1:
            raise InvalidManifestError(
                f"Manifest lists chart '{name}' more than once: "
                + ", ".join(str(ref) for ref in refs)
            )
        return refs[0]

    def missing_charts(self, platform: PlatformConfig) -> list[str]:
        """Return the names of core platform charts absent from the manifest."""
        names = {ref.name for ref in self.chart_references()}
        return [chart for chart in platform.core_charts if chart not in names]

    def json(self) -> str:
        """Return the indented JSON document for this manifest."""
        return json.dumps(self.to_dict(), indent=2)


def parse_manifest(content: str) -> DependencyManifest:
    """Parse the contents of a manifest file."""
    if not content.strip():
        raise InvalidManifestError("Manifest file is empty")
    try:
        doc: Any = json.loads(content)
    except json.JSONDecodeError as err:
        raise InvalidManifestError(f"Invalid JSON: {err}") from err
    if not isinstance(doc, dict):
        raise InvalidManifestError(
            f"Manifest must be a JSON object, got {type(doc).__name__}"
        )
    for key in CATEGORIES:
        values = doc.get(key, [])
        if not isinstance(values, list) or not all(
            isinstance(value, str) for value in values
        ):
            raise InvalidManifestError(
                f"Manifest key '{key}' must be a list of strings: {values}"
            )
    try:
        return DependencyManifest.from_dict(doc)
    except (MissingField, InvalidFieldValue) as err:
        raise InvalidManifestError(f"Invalid manifest: {err}") from err


async def read_manifest(manifest_path: Path) -> DependencyManifest:
    """Return the contents of a serialized manifest file.

    A manifest file is typically created by `kw-airgap list` or edited by hand.
    """
    try:
        async with aiofiles.open(str(manifest_path)) as manifest_file:
            content = await manifest_file.read()
    except OSError as err:
        raise InvalidManifestError(
            f"Unable to read manifest {manifest_path}: {err}"
        ) from err
    manifest = parse_manifest(content)
    _LOGGER.debug(
        "Read manifest %s with %d images, %d policies, %d charts",
        manifest_path,
        len(manifest.images),
        len(manifest.policies),
        len(manifest.charts),
    )
    return manifest


async def write_manifest(manifest_path: Path, manifest: DependencyManifest) -> None:
    """Write the specified manifest content to disk."""
    content = manifest.json()
    async with aiofiles.open(str(manifest_path), mode="w") as manifest_file:
        await manifest_file.write(content + "\n")
