"""Image transport backed by the `docker` command line tool."""

import logging
from pathlib import Path

from . import command
from .exceptions import DockerException
from .transport import ImageTransport

__all__ = [
    "Docker",
]

_LOGGER = logging.getLogger(__name__)


DOCKER_BIN = "docker"


class Docker(ImageTransport):
    """Pulls, saves, loads, tags and pushes images with docker."""

    binary = DOCKER_BIN

    def __init__(self, runner: command.CommandRunner) -> None:
        """Initialize Docker."""
        self._runner = runner

    async def _run(self, args: list[str]) -> None:
        await self._runner.run(command.Command([DOCKER_BIN, *args], exc=DockerException))

    async def pull(self, ref: str) -> None:
        """Pull an image into the local image store."""
        await self._run(["pull", "-q", ref])

    async def save(self, refs: list[str], archive: Path) -> None:
        """Bundle the pulled images into one archive file."""
        await self._run(["save", "--output", str(archive), *refs])

    async def load(self, archive: Path) -> None:
        """Load every image in an archive back into the local image store."""
        await self._run(["load", "--input", str(archive)])

    async def tag(self, ref: str, new_ref: str) -> None:
        """Give a local image an additional name."""
        await self._run(["tag", ref, new_ref])

    async def push(self, ref: str) -> None:
        """Push a local image to the registry named in its reference."""
        await self._run(["push", "-q", ref])
