"""Configuration objects for kw-airgap."""

from dataclasses import dataclass, field
from pathlib import Path

from .exceptions import ConfigurationError
from .reference import Reference, chart_filename

IMAGES_ARCHIVE = "kubewarden-images.tar"
POLICIES_ARCHIVE = "kubewarden-policies.tar.gz"


@dataclass
class AirgapConfig:
    """Options shared by the pull, push and install phases."""

    registry: str | None = None
    """Private registry host[:port] that artifacts are pushed to."""

    insecure: bool = False
    """Relax transport verification for the private registry."""

    dry_run: bool = False
    """Print the external commands instead of running them."""

    cache_dir: Path = field(default_factory=lambda: Path("."))
    """Directory holding the local archives and chart files."""

    def require_registry(self) -> str:
        """Return the target registry or fail when it was not supplied."""
        if not self.registry:
            raise ConfigurationError("Required parameter is missing: --registry")
        return self.registry

    @property
    def images_archive(self) -> Path:
        """Archive bundling every image in the manifest."""
        return self.cache_dir / IMAGES_ARCHIVE

    @property
    def policies_archive(self) -> Path:
        """Archive bundling every policy in the manifest."""
        return self.cache_dir / POLICIES_ARCHIVE

    def chart_path(self, ref: Reference) -> Path:
        """Local file of a pulled chart version."""
        return self.cache_dir / chart_filename(ref)


@dataclass
class CertManagerConfig:
    """Where cert-manager comes from and how its images are rewired."""

    repo_url: str = "https://charts.jetstack.io"
    chart: str = "cert-manager"
    version: str = "v1.10.1"
    namespace: str = "cert-manager"
    image_namespace: str = "jetstack"

    image_values: dict[str, str] = field(
        default_factory=lambda: {
            "image.repository": "cert-manager-controller",
            "webhook.image.repository": "cert-manager-webhook",
            "cainjector.image.repository": "cert-manager-cainjector",
            "startupapicheck.image.repository": "cert-manager-ctl",
        }
    )
    """Chart value key to image name for each cert-manager component."""

    @property
    def chart_reference(self) -> str:
        """Pinned chart reference added to the manifest."""
        return f"{self.repo_url}/{self.chart}:{self.version}"


@dataclass
class PlatformConfig:
    """Names of the platform charts and the places they are discovered."""

    repo_name: str = "kubewarden"
    """Name of the locally configured helm repository."""

    namespace: str = "kubewarden"
    """Namespace the platform charts are installed into."""

    crds_chart: str = "kubewarden-crds"
    controller_chart: str = "kubewarden-controller"
    defaults_chart: str = "kubewarden-defaults"

    release_repo: str = "kubewarden/helm-charts"
    """GitHub repository publishing the per release asset listings."""

    images_asset_suffix: str = "images.txt"
    policies_asset_suffix: str = "policylist.txt"

    default_registry_value: str = "common.cattle.systemDefaultRegistry"
    recommended_policies_value: str = "recommendedPolicies.enabled"
    insecure_sources_value: str = "policyServer.insecureSources[0]"

    cert_manager: CertManagerConfig = field(default_factory=CertManagerConfig)

    @property
    def core_charts(self) -> list[str]:
        """Charts every manifest must contain, in install order."""
        return [self.crds_chart, self.controller_chart, self.defaults_chart]

    def release_tag(self, defaults_version: str) -> str:
        """Name of the release that publishes the listings for a version."""
        return f"{self.defaults_chart}-{defaults_version}"
