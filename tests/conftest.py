"""Fixtures and fake collaborators for kw-airgap tests."""

from pathlib import Path
from typing import Any

import pytest

from kw_airgap.config import AirgapConfig
from kw_airgap.exceptions import TransportError
from kw_airgap.transport import (
    ChartEntry,
    ChartRepository,
    ImageTransport,
    PolicyTransport,
    ReleaseAsset,
    ReleaseAssets,
    Tools,
)

CALL = tuple[Any, ...]


class FakeImageTransport(ImageTransport):
    """Records image operations; `save` writes a placeholder archive.

    Adding `"save"` to `fail_on` makes `save` fail after writing the file.
    """

    def __init__(self, calls: list[CALL]) -> None:
        self.calls = calls
        self.fail_on: set[str] = set()

    async def pull(self, ref: str) -> None:
        self.calls.append(("image.pull", ref))
        if ref in self.fail_on:
            raise TransportError(f"Unable to pull {ref}")

    async def save(self, refs: list[str], archive: Path) -> None:
        self.calls.append(("image.save", tuple(refs), archive.name))
        archive.write_text("\n".join(refs))
        if "save" in self.fail_on:
            raise TransportError(f"Unable to save {archive.name}")

    async def load(self, archive: Path) -> None:
        self.calls.append(("image.load", archive.name))

    async def tag(self, ref: str, new_ref: str) -> None:
        self.calls.append(("image.tag", ref, new_ref))

    async def push(self, ref: str) -> None:
        self.calls.append(("image.push", ref))
        if ref in self.fail_on:
            raise TransportError(f"Unable to push {ref}")


class FakePolicyTransport(PolicyTransport):
    """Records policy operations; `save` writes a placeholder archive."""

    def __init__(self, calls: list[CALL]) -> None:
        self.calls = calls
        self.fail_on: set[str] = set()

    async def pull(self, uri: str) -> None:
        self.calls.append(("policy.pull", uri))
        if uri in self.fail_on:
            raise TransportError(f"Unable to pull {uri}")

    async def save(self, uris: list[str], archive: Path) -> None:
        self.calls.append(("policy.save", tuple(uris), archive.name))
        archive.write_text("\n".join(uris))
        if "save" in self.fail_on:
            raise TransportError(f"Unable to save {archive.name}")

    async def load(self, archive: Path) -> None:
        self.calls.append(("policy.load", archive.name))

    async def push(
        self, uri: str, target: str, insecure_sources: list[str] | None = None
    ) -> None:
        self.calls.append(("policy.push", uri, target, insecure_sources))
        if uri in self.fail_on:
            raise TransportError(f"Unable to push {uri}")


class FakeChartRepository(ChartRepository):
    """Serves a canned repository index and records pulls and installs."""

    def __init__(self, calls: list[CALL]) -> None:
        self.calls = calls
        self.repos: dict[str, str] = {}
        self.entries: list[ChartEntry] = []
        self.rendered: str = ""
        self.fail_on: set[str] = set()

    async def repo_url(self, repo_name: str) -> str | None:
        return self.repos.get(repo_name)

    async def search(self, prefix: str) -> list[ChartEntry]:
        self.calls.append(("chart.search", prefix))
        return [entry for entry in self.entries if prefix in entry.name]

    async def template(
        self, repo_url: str, chart: str, version: str | None = None
    ) -> str:
        self.calls.append(("chart.template", repo_url, chart, version))
        return self.rendered

    async def pull(
        self, repo_url: str, chart: str, version: str, destination: Path
    ) -> None:
        self.calls.append(("chart.pull", repo_url, chart, version))
        if chart in self.fail_on:
            raise TransportError(f"Unable to pull {chart}")
        (destination / f"{chart}-{version}.tgz").write_text(chart)

    async def install(
        self,
        chart_file: Path,
        release: str,
        namespace: str,
        values: dict[str, str],
        wait: bool = False,
        create_namespace: bool = False,
    ) -> None:
        self.calls.append(
            (
                "chart.install",
                release,
                chart_file.name,
                namespace,
                values,
                wait,
                create_namespace,
            )
        )
        if release in self.fail_on:
            raise TransportError(f"Unable to install {release}")


class FakeReleaseAssets(ReleaseAssets):
    """Serves canned release assets keyed by tag and url."""

    def __init__(self, calls: list[CALL]) -> None:
        self.calls = calls
        self.assets: dict[str, list[ReleaseAsset]] = {}
        self.files: dict[str, str] = {}

    async def list_assets(self, tag: str) -> list[ReleaseAsset]:
        self.calls.append(("release.list_assets", tag))
        return self.assets.get(tag, [])

    async def fetch_text(self, url: str) -> str:
        self.calls.append(("release.fetch_text", url))
        return self.files[url]


@pytest.fixture(name="calls")
def calls_fixture() -> list[CALL]:
    """Fixture for the ordered log of collaborator calls."""
    return []


@pytest.fixture(name="tools")
def tools_fixture(calls: list[CALL]) -> Tools:
    """Fixture for a set of fake collaborators sharing one call log."""
    return Tools(
        images=FakeImageTransport(calls),
        policies=FakePolicyTransport(calls),
        charts=FakeChartRepository(calls),
        releases=FakeReleaseAssets(calls),
    )


@pytest.fixture(name="config")
def config_fixture(tmp_path: Path) -> AirgapConfig:
    """Fixture for a configuration using a temporary cache directory."""
    return AirgapConfig(registry="localhost:5000", cache_dir=tmp_path)
