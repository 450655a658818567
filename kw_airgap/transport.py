"""Interfaces of the external tools that move artifacts around.

The pipeline decides what to fetch, in what order, whether to skip and how
to rewrite references. Moving bytes is delegated to these collaborators which
are implemented by shelling out to `docker`, `kwctl` and `helm` and by calling
the GitHub release API. Tests replace them with fakes.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
import logging
from pathlib import Path
import shutil
from typing import Any

from .exceptions import ConfigurationError

__all__ = [
    "ImageTransport",
    "PolicyTransport",
    "ChartRepository",
    "ReleaseAssets",
    "ChartEntry",
    "ReleaseAsset",
    "Tools",
    "check_requirements",
]

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChartEntry:
    """A chart version found in a local chart repository index."""

    name: str
    """Repository qualified name e.g. `kubewarden/kubewarden-crds`."""

    version: str

    @property
    def chart_name(self) -> str:
        """Name of the chart without the repository prefix."""
        return self.name.split("/", 1)[-1]


@dataclass(frozen=True)
class ReleaseAsset:
    """A downloadable file attached to a published release."""

    name: str
    url: str


class ImageTransport(ABC):
    """Moves container images between registries and local archives."""

    binary: str | None = None
    """Executable that must be on PATH, if any."""

    @abstractmethod
    async def pull(self, ref: str) -> None:
        """Pull an image into the local image store."""

    @abstractmethod
    async def save(self, refs: list[str], archive: Path) -> None:
        """Bundle the pulled images into one archive file."""

    @abstractmethod
    async def load(self, archive: Path) -> None:
        """Load every image in an archive back into the local image store."""

    @abstractmethod
    async def tag(self, ref: str, new_ref: str) -> None:
        """Give a local image an additional name."""

    @abstractmethod
    async def push(self, ref: str) -> None:
        """Push a local image to the registry named in its reference."""


class PolicyTransport(ABC):
    """Moves signed policy bundles between registries and local archives."""

    binary: str | None = None

    @abstractmethod
    async def pull(self, uri: str) -> None:
        """Pull a policy into the local policy store."""

    @abstractmethod
    async def save(self, uris: list[str], archive: Path) -> None:
        """Bundle the pulled policies into one archive file."""

    @abstractmethod
    async def load(self, archive: Path) -> None:
        """Load every policy in an archive back into the local policy store."""

    @abstractmethod
    async def push(
        self, uri: str, target: str, insecure_sources: list[str] | None = None
    ) -> None:
        """Push a locally stored policy to the target URI."""


class ChartRepository(ABC):
    """Client of the locally configured chart repositories."""

    binary: str | None = None

    @abstractmethod
    async def repo_url(self, repo_name: str) -> str | None:
        """Return the URL of a configured repository, if present."""

    @abstractmethod
    async def search(self, prefix: str) -> list[ChartEntry]:
        """Return the latest version of every chart matching the prefix."""

    @abstractmethod
    async def template(
        self, repo_url: str, chart: str, version: str | None = None
    ) -> str:
        """Render a chart with default values and return the YAML stream."""

    @abstractmethod
    async def pull(
        self, repo_url: str, chart: str, version: str, destination: Path
    ) -> None:
        """Download a chart version into the destination directory."""

    @abstractmethod
    async def install(
        self,
        chart_file: Path,
        release: str,
        namespace: str,
        values: dict[str, str],
        wait: bool = False,
        create_namespace: bool = False,
    ) -> None:
        """Install a chart archive as a named release."""


class ReleaseAssets(ABC):
    """Lists the files published alongside a release."""

    @abstractmethod
    async def list_assets(self, tag: str) -> list[ReleaseAsset]:
        """Return the assets of the release with the given tag."""

    @abstractmethod
    async def fetch_text(self, url: str) -> str:
        """Download a text asset."""


@dataclass
class Tools:
    """The set of collaborators used by the pipeline phases."""

    images: ImageTransport
    policies: PolicyTransport
    charts: ChartRepository
    releases: ReleaseAssets

    @classmethod
    def create(cls, dry_run: bool = False, **kwargs: Any) -> "Tools":
        """Create the collaborators backed by the real command line tools."""
        # Deferred to avoid a circular import
        from .command import CommandRunner
        from .docker import Docker
        from .helm import Helm
        from .kwctl import Kwctl
        from .releases import GitHubReleases

        runner = CommandRunner(dry_run=dry_run)
        return cls(
            images=Docker(runner),
            policies=Kwctl(runner),
            charts=Helm(runner),
            releases=GitHubReleases(**kwargs),
        )

    @property
    def binaries(self) -> list[str]:
        """Executables required by the collaborators."""
        return [
            binary
            for binary in (self.images.binary, self.policies.binary, self.charts.binary)
            if binary
        ]


def check_requirements(binaries: list[str]) -> None:
    """Ensure required command line tools are available on PATH."""
    missing = [binary for binary in binaries if shutil.which(binary) is None]
    if missing:
        raise ConfigurationError(
            f"Missing required command line tools: {', '.join(missing)}. "
            "Install them and ensure they are on PATH."
        )
    _LOGGER.debug("Found required tools: %s", binaries)
