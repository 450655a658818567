"""Tests for command library."""

import pytest

from kw_airgap.command import Command, CommandRunner, run
from kw_airgap.exceptions import HelmException, TransportError


async def test_command() -> None:
    """Test stdout parsing of a command."""
    result = await run(Command(["echo", "Hello"]))
    assert result == "Hello\n"


async def test_failed_command() -> None:
    """Test a failing command."""
    with pytest.raises(TransportError, match="return code 1"):
        await run(Command(["/bin/false"]))


async def test_failed_command_exception_type() -> None:
    """Test the command raises its configured exception type."""
    with pytest.raises(HelmException):
        await run(Command(["/bin/false"], exc=HelmException))


async def test_timeout() -> None:
    """Test a command that does not finish in time."""
    with pytest.raises(TransportError, match="timed out"):
        await run(Command(["sleep", "5"], timeout=0.1))


def test_command_string() -> None:
    """Test arguments are quoted when rendered."""
    cmd = Command(["helm", "install", "--set", "policyServer.insecureSources[0]=r:5000"])
    assert cmd.string == "helm install --set 'policyServer.insecureSources[0]=r:5000'"


async def test_dry_run(capsys: pytest.CaptureFixture[str]) -> None:
    """Test a dry run prints the command instead of running it."""
    runner = CommandRunner(dry_run=True)
    result = await runner.run(Command(["/bin/false"]))
    assert result == ""
    assert capsys.readouterr().out == "- /bin/false\n"


async def test_dry_run_read_only(capsys: pytest.CaptureFixture[str]) -> None:
    """Test read only commands still run in dry run mode."""
    runner = CommandRunner(dry_run=True)
    result = await runner.run(Command(["echo", "Hello"]), read_only=True)
    assert result == "Hello\n"
    assert capsys.readouterr().out == ""
