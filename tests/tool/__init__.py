"""Test helpers for kw-airgap tools."""

from kw_airgap.command import Command, run

KW_AIRGAP_BIN = "kw-airgap"


async def run_command(args: list[str], env: dict[str, str] | None = None) -> str:
    return await run(Command([KW_AIRGAP_BIN] + args, env=env))
