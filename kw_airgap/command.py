"""Library for issuing external commands using asyncio and returning the result.

Commands are always awaited one at a time. A `CommandRunner` sits in front of
every mutating command so that a dry run prints what would be executed
instead of spawning the process.
"""

import asyncio
import logging
import os
import shlex
import subprocess
from dataclasses import dataclass
from pathlib import Path

from .exceptions import TransportError

_LOGGER = logging.getLogger(__name__)

DRY_RUN_PREFIX = "- "


# No public API
__all__: list[str] = []


def format_path(path: Path) -> str:
    """Format path for debugging."""
    if path.is_absolute():
        cwd = Path.cwd()
        if path.is_relative_to(cwd):
            rel_path = str(path.relative_to(cwd))
            return f"{rel_path} (abs)"
    return str(path)


@dataclass
class Command:
    """An instance of a command to run."""

    cmd: list[str]
    """Array of command line arguments."""

    cwd: Path | None = None
    """Current working directory."""

    exc: type[TransportError] = TransportError
    """Exception to throw in case of an error."""

    timeout: float | None = None
    """Seconds to wait before giving up, or forever when unset."""

    env: dict[str, str] | None = None
    """Environment variables for the subprocess."""

    @property
    def string(self) -> str:
        """Render the command as a single string."""
        return " ".join([shlex.quote(arg) for arg in self.cmd])

    def __str__(self) -> str:
        """Render as a debug string."""
        cwd: str = ""
        if self.cwd:
            cwd = f"({format_path(self.cwd)}) "
        return f"{cwd}{self.string}"

    async def run(self) -> bytes:
        """Run the command, returning stdout."""
        _LOGGER.debug("Running command: %s", self)
        env = {
            **os.environ,
            **(self.env if self.env else {}),
        }
        proc = await asyncio.create_subprocess_shell(
            self.string,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            cwd=self.cwd,
            env=env,
        )
        try:
            out, err = await asyncio.wait_for(proc.communicate(), self.timeout)
        except asyncio.TimeoutError as timeout_err:
            proc.kill()
            await proc.wait()
            raise self.exc(f"Command '{self}' timed out") from timeout_err
        if proc.returncode:
            errors = [f"Command '{self}' failed with return code {proc.returncode}"]
            if out:
                errors.append(out.decode("utf-8"))
            if err:
                errors.append(err.decode("utf-8"))
            _LOGGER.debug("\n".join(errors))
            raise self.exc("\n".join(errors))
        return out


async def run(cmd: Command) -> str:
    """Run the specified command and return stdout."""
    out = await cmd.run()
    return out.decode("utf-8") if out else ""


@dataclass
class CommandRunner:
    """Runs commands, or only prints them when in dry run mode."""

    dry_run: bool = False

    async def run(self, cmd: Command, read_only: bool = False) -> str:
        """Run the command unless this is a dry run.

        Read only commands (e.g. queries against a local chart index) are
        executed even in dry run mode since they do not change any state.
        """
        if self.dry_run and not read_only:
            print(f"{DRY_RUN_PREFIX}{cmd.string}", flush=True)
            return ""
        return await run(cmd)
