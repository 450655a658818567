"""Policy transport backed by the `kwctl` command line tool."""

from collections.abc import Generator
from contextlib import contextmanager
import logging
from pathlib import Path
import tempfile

import yaml

from . import command
from .exceptions import KwctlException
from .transport import PolicyTransport

__all__ = [
    "Kwctl",
    "insecure_sources_file",
]

_LOGGER = logging.getLogger(__name__)


KWCTL_BIN = "kwctl"
DRY_RUN_SOURCES_PATH = Path("sources.yaml")


@contextmanager
def insecure_sources_file(
    registries: list[str], dry_run: bool = False
) -> Generator[Path, None, None]:
    """Context manager for a temporary kwctl sources file.

    The file lists the registries that kwctl may talk to without TLS
    verification. Nothing is written in dry run mode and a placeholder path is
    returned instead.
    """
    if dry_run:
        yield DRY_RUN_SOURCES_PATH
        return

    with tempfile.NamedTemporaryFile(
        mode="w+",
        prefix="kw-airgap-sources-",
        suffix=".yaml",
    ) as temp_file:
        yaml.dump({"insecure_sources": registries}, temp_file, sort_keys=False)
        temp_file.flush()
        yield Path(temp_file.name)


class Kwctl(PolicyTransport):
    """Pulls, saves, loads and pushes policies with kwctl."""

    binary = KWCTL_BIN

    def __init__(self, runner: command.CommandRunner) -> None:
        """Initialize Kwctl."""
        self._runner = runner

    async def _run(self, args: list[str]) -> None:
        await self._runner.run(command.Command([KWCTL_BIN, *args], exc=KwctlException))

    async def pull(self, uri: str) -> None:
        """Pull a policy into the local policy store."""
        await self._run(["pull", uri])

    async def save(self, uris: list[str], archive: Path) -> None:
        """Bundle the pulled policies into one archive file."""
        await self._run(["save", "--output", str(archive), *uris])

    async def load(self, archive: Path) -> None:
        """Load every policy in an archive back into the local policy store."""
        await self._run(["load", "--input", str(archive)])

    async def push(
        self, uri: str, target: str, insecure_sources: list[str] | None = None
    ) -> None:
        """Push a locally stored policy to the target URI.

        When `insecure_sources` is given, only those registries are contacted
        without TLS verification.
        """
        if not insecure_sources:
            await self._run(["push", uri, target])
            return
        with insecure_sources_file(
            insecure_sources, dry_run=self._runner.dry_run
        ) as sources_path:
            await self._run(["push", uri, target, "--sources-path", str(sources_path)])
