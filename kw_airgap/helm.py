"""Library for running `helm` against the locally configured chart repositories.

The repositories themselves are managed with `helm repo add` by the user. This
module queries their index, pulls chart archives for transport and installs
the pulled archives:

```python
from kw_airgap.command import CommandRunner
from kw_airgap.helm import Helm

helm = Helm(CommandRunner())
for entry in await helm.search("kubewarden"):
    print(f"Found chart {entry.name} {entry.version}")
```
"""

import json
import logging
from pathlib import Path
from typing import Any

from . import command
from .exceptions import DiscoveryError, HelmException
from .transport import ChartEntry, ChartRepository

__all__ = [
    "Helm",
]

_LOGGER = logging.getLogger(__name__)


HELM_BIN = "helm"


def _parse_json_list(content: str, cmd: str) -> list[dict[str, Any]]:
    """Parse the JSON list printed by `helm ... -o json`."""
    try:
        doc = json.loads(content) if content.strip() else []
    except json.JSONDecodeError as err:
        raise DiscoveryError(f"Unable to parse output of '{cmd}': {err}") from err
    if not isinstance(doc, list) or not all(isinstance(item, dict) for item in doc):
        raise DiscoveryError(f"Unexpected output of '{cmd}': {content}")
    return doc


class Helm(ChartRepository):
    """Queries chart repositories, pulls and installs charts."""

    binary = HELM_BIN

    def __init__(self, runner: command.CommandRunner) -> None:
        """Initialize Helm."""
        self._runner = runner

    def _command(self, args: list[str]) -> command.Command:
        return command.Command([HELM_BIN, *args], exc=HelmException)

    async def repo_url(self, repo_name: str) -> str | None:
        """Return the URL of a configured repository, if present."""
        cmd = self._command(["repo", "list", "-o", "json"])
        try:
            content = await self._runner.run(cmd, read_only=True)
        except HelmException as err:
            # helm exits non-zero when no repositories are configured at all
            _LOGGER.debug("Unable to list helm repositories: %s", err)
            return None
        for repo in _parse_json_list(content, cmd.string):
            if repo.get("name") == repo_name:
                return repo.get("url")
        return None

    async def search(self, prefix: str) -> list[ChartEntry]:
        """Return the latest version of every chart matching the prefix."""
        cmd = self._command(["search", "repo", prefix, "-o", "json"])
        content = await self._runner.run(cmd, read_only=True)
        entries = []
        for item in _parse_json_list(content, cmd.string):
            if not (name := item.get("name")) or not (version := item.get("version")):
                raise DiscoveryError(f"Unexpected chart entry from '{cmd}': {item}")
            entries.append(ChartEntry(name=name, version=version))
        _LOGGER.debug("Search for '%s' found %d charts", prefix, len(entries))
        return entries

    async def template(
        self, repo_url: str, chart: str, version: str | None = None
    ) -> str:
        """Render a chart with default values and return the YAML stream."""
        args = ["template", "--repo", repo_url, chart]
        if version:
            args.extend(["--version", version])
        return await self._runner.run(self._command(args), read_only=True)

    async def pull(
        self, repo_url: str, chart: str, version: str, destination: Path
    ) -> None:
        """Download a chart version into the destination directory."""
        await self._runner.run(
            self._command(
                [
                    "pull",
                    "--repo",
                    repo_url,
                    chart,
                    f"--version={version}",
                    "--destination",
                    str(destination),
                ]
            )
        )

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
        args = ["install", release, str(chart_file), "-n", namespace]
        if create_namespace:
            args.append("--create-namespace")
        if wait:
            args.append("--wait")
        for key, value in values.items():
            args.extend(["--set", f"{key}={value}"])
        await self._runner.run(self._command(args))
