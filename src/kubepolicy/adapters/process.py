"""Asynchronous execution of external command-line tools."""

import asyncio
import logging
import shlex
from dataclasses import dataclass

logger = logging.getLogger(__name__)


class CommandTimeout(Exception):
    """External command did not finish within its timeout."""


@dataclass
class CommandResult:
    """Captured outcome of one external command."""
    args: list[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def failed(self) -> bool:
        """Non-zero exit or anything written to the error stream."""
        return self.returncode != 0 or bool(self.stderr.strip())

    @property
    def diagnostic(self) -> str:
        if self.stderr.strip():
            return self.stderr.strip()
        if self.returncode != 0:
            return f"{self.args[0]} exited with status {self.returncode}"
        return "Unknown error occurred."


async def run_command(args: list[str], timeout: float | None = None) -> CommandResult:
    """Run a command without a shell and capture its output.

    Raises:
        FileNotFoundError: If the executable cannot be found
        CommandTimeout: If the command runs longer than ``timeout`` seconds
    """
    logger.debug(f"Running command: {shlex.join(args)}")
    process = await asyncio.create_subprocess_exec(
        *args,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        raise CommandTimeout(f"{args[0]} did not finish within {timeout} seconds")

    return CommandResult(
        args=list(args),
        returncode=process.returncode,
        stdout=stdout.decode("utf-8", errors="replace"),
        stderr=stderr.decode("utf-8", errors="replace"),
    )
