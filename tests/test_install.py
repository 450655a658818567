"""Tests for the install phase."""

from pathlib import Path
import random
from typing import Any

import pytest

from kw_airgap.config import AirgapConfig
from kw_airgap.exceptions import ConfigurationError, InvalidManifestError, TransportError
from kw_airgap.install import install_manifest, plan_install
from kw_airgap.manifest import DependencyManifest

CERT_MANAGER = "https://charts.jetstack.io/cert-manager:v1.10.1"
CHARTS = [
    "https://charts.kubewarden.io/kubewarden-crds:1.2.3",
    "https://charts.kubewarden.io/kubewarden-controller:1.2.8",
    "https://charts.kubewarden.io/kubewarden-defaults:1.2.8",
]


async def test_install(config: AirgapConfig, tools: Any, calls: list[Any]) -> None:
    """Test the platform charts are installed in order with registry values."""
    await install_manifest(DependencyManifest(charts=tuple(CHARTS)), config, tools)

    assert calls == [
        (
            "chart.install",
            "kubewarden-crds",
            "kubewarden-crds-1.2.3.tgz",
            "kubewarden",
            {},
            False,
            True,
        ),
        (
            "chart.install",
            "kubewarden-controller",
            "kubewarden-controller-1.2.8.tgz",
            "kubewarden",
            {"common.cattle.systemDefaultRegistry": "localhost:5000"},
            True,
            False,
        ),
        (
            "chart.install",
            "kubewarden-defaults",
            "kubewarden-defaults-1.2.8.tgz",
            "kubewarden",
            {
                "common.cattle.systemDefaultRegistry": "localhost:5000",
                "recommendedPolicies.enabled": "True",
            },
            False,
            False,
        ),
    ]


def test_plan_with_cert_manager(config: AirgapConfig) -> None:
    """Test cert-manager is installed first with its images rewired."""
    manifest = DependencyManifest(charts=tuple(CHARTS + [CERT_MANAGER]))
    steps = plan_install(manifest, config)

    assert [step.release for step in steps] == [
        "cert-manager",
        "kubewarden-crds",
        "kubewarden-controller",
        "kubewarden-defaults",
    ]
    cert_manager = steps[0]
    assert cert_manager.chart_file == config.cache_dir / "cert-manager-v1.10.1.tgz"
    assert cert_manager.namespace == "cert-manager"
    assert cert_manager.create_namespace
    assert cert_manager.values == {
        "installCRDs": "true",
        "image.repository": "localhost:5000/jetstack/cert-manager-controller",
        "webhook.image.repository": "localhost:5000/jetstack/cert-manager-webhook",
        "cainjector.image.repository": "localhost:5000/jetstack/cert-manager-cainjector",
        "startupapicheck.image.repository": "localhost:5000/jetstack/cert-manager-ctl",
    }
    assert steps[1].create_namespace
    assert not steps[2].create_namespace


@pytest.mark.parametrize("seed", range(5))
def test_plan_order_ignores_list_order(config: AirgapConfig, seed: int) -> None:
    """Test the install order is derived from chart names, not positions."""
    charts = CHARTS + [CERT_MANAGER]
    random.Random(seed).shuffle(charts)
    steps = plan_install(DependencyManifest(charts=tuple(charts)), config)
    assert [step.release for step in steps] == [
        "cert-manager",
        "kubewarden-crds",
        "kubewarden-controller",
        "kubewarden-defaults",
    ]


def test_plan_insecure(config: AirgapConfig) -> None:
    """Test the insecure option declares the registry as a policy source."""
    config.insecure = True
    steps = plan_install(DependencyManifest(charts=tuple(CHARTS)), config)
    assert steps[-1].values["policyServer.insecureSources[0]"] == "localhost:5000"


@pytest.mark.parametrize("missing", range(3))
async def test_install_missing_chart(
    config: AirgapConfig, tools: Any, calls: list[Any], missing: int
) -> None:
    """Test a missing core chart is named and nothing is installed."""
    charts = list(CHARTS)
    name = charts.pop(missing).rsplit("/", 1)[-1].split(":")[0]

    with pytest.raises(InvalidManifestError, match=f"missing required chart '{name}'"):
        await install_manifest(DependencyManifest(charts=tuple(charts)), config, tools)
    assert calls == []


async def test_install_requires_registry(tmp_path: Path, tools: Any) -> None:
    """Test install fails without a target registry."""
    with pytest.raises(ConfigurationError, match="--registry"):
        await install_manifest(
            DependencyManifest(charts=tuple(CHARTS)),
            AirgapConfig(cache_dir=tmp_path),
            tools,
        )


async def test_install_failure_stops_sequence(
    config: AirgapConfig, tools: Any, calls: list[Any]
) -> None:
    """Test a failed step halts every later step."""
    tools.charts.fail_on.add("kubewarden-controller")

    with pytest.raises(TransportError, match="Unable to install kubewarden-controller"):
        await install_manifest(DependencyManifest(charts=tuple(CHARTS)), config, tools)

    assert [call[1] for call in calls] == ["kubewarden-crds", "kubewarden-controller"]


async def test_install_cert_manager_creates_namespace(
    config: AirgapConfig, tools: Any, calls: list[Any]
) -> None:
    """Test cert-manager and the CRDs are installed into new namespaces."""
    manifest = DependencyManifest(charts=tuple([CERT_MANAGER] + CHARTS))
    await install_manifest(manifest, config, tools)

    assert [(call[1], call[3], call[6]) for call in calls] == [
        ("cert-manager", "cert-manager", True),
        ("kubewarden-crds", "kubewarden", True),
        ("kubewarden-controller", "kubewarden", False),
        ("kubewarden-defaults", "kubewarden", False),
    ]
