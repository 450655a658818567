"""Installs the platform charts configured for the private registry.

The install order is derived from the chart names in the manifest, not from
their position in the list:

    cert-manager (only when listed) -> CRDs -> controller -> defaults

The whole plan is validated before the first chart is installed. A failed
step stops the sequence; charts installed by earlier steps are left in place.
"""

from dataclasses import dataclass, field
import logging
from pathlib import Path

from .config import AirgapConfig, PlatformConfig
from .context import step
from .manifest import DependencyManifest
from .transport import Tools

__all__ = [
    "InstallStep",
    "plan_install",
    "install_manifest",
]

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class InstallStep:
    """A single `helm install` of a pulled chart file."""

    release: str
    chart_file: Path
    namespace: str
    values: dict[str, str] = field(default_factory=dict)
    wait: bool = False
    create_namespace: bool = False


def _cert_manager_step(
    manifest: DependencyManifest, config: AirgapConfig, platform: PlatformConfig
) -> InstallStep:
    registry = config.require_registry()
    cert_manager = platform.cert_manager
    values = {"installCRDs": "true"}
    for key, image in cert_manager.image_values.items():
        values[key] = f"{registry}/{cert_manager.image_namespace}/{image}"
    return InstallStep(
        release=cert_manager.chart,
        chart_file=config.chart_path(manifest.find_chart(cert_manager.chart)),
        namespace=cert_manager.namespace,
        values=values,
        create_namespace=True,
    )


def plan_install(
    manifest: DependencyManifest,
    config: AirgapConfig,
    platform: PlatformConfig | None = None,
) -> list[InstallStep]:
    """Return the ordered install steps for the charts in the manifest."""
    if platform is None:
        platform = PlatformConfig()
    registry = config.require_registry()

    steps = []
    if manifest.includes_cert_manager:
        steps.append(_cert_manager_step(manifest, config, platform))

    steps.append(
        InstallStep(
            release=platform.crds_chart,
            chart_file=config.chart_path(manifest.find_chart(platform.crds_chart)),
            namespace=platform.namespace,
            create_namespace=True,
        )
    )
    steps.append(
        InstallStep(
            release=platform.controller_chart,
            chart_file=config.chart_path(
                manifest.find_chart(platform.controller_chart)
            ),
            namespace=platform.namespace,
            values={platform.default_registry_value: registry},
            wait=True,
        )
    )
    defaults_values = {
        platform.default_registry_value: registry,
        platform.recommended_policies_value: "True",
    }
    if config.insecure:
        defaults_values[platform.insecure_sources_value] = registry
    steps.append(
        InstallStep(
            release=platform.defaults_chart,
            chart_file=config.chart_path(manifest.find_chart(platform.defaults_chart)),
            namespace=platform.namespace,
            values=defaults_values,
        )
    )
    return steps


async def install_manifest(
    manifest: DependencyManifest,
    config: AirgapConfig,
    tools: Tools,
    platform: PlatformConfig | None = None,
) -> None:
    """Install the charts of the manifest against the private registry."""
    steps = plan_install(manifest, config, platform)
    for install in steps:
        with step(f"Install {install.release}"):
            await tools.charts.install(
                install.chart_file,
                install.release,
                install.namespace,
                install.values,
                wait=install.wait,
                create_namespace=install.create_namespace,
            )
