"""
Generator backend that shells out to an AI command-line tool.
"""

import asyncio
import shutil
import subprocess
from typing import List
from loguru import logger

from .base import MessageGenerator, GenerationError, FailureKind
from ..utils.diagnostics import classify_error_output


class CliToolBackend(MessageGenerator):
    """Pipe the diff to an AI CLI on stdin and read the message from stdout."""

    def __init__(self, command: List[str], instruction: str, timeout: float = 60):
        super().__init__(instruction=instruction, timeout=timeout)
        self.command = list(command)
        self.backend_type = "cli"

    @property
    def target(self) -> str:
        return self.command[0]

    async def call_api(self, diff: str) -> str:
        argv = [*self.command, self.instruction]
        logger.debug(f"Running {self.command[0]} with {len(argv) - 1} argument(s)")

        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise GenerationError(FailureKind.TOOL_MISSING, str(e), exit_code=127)
        except PermissionError as e:
            raise GenerationError(FailureKind.TOOL_MISSING, str(e), exit_code=126)

        try:
            stdout, stderr = await process.communicate(diff.encode('utf-8'))
        except asyncio.CancelledError:
            # Cancelled by the timeout: the tool must not outlive the call
            if process.returncode is None:
                process.kill()
                await process.wait()
                logger.debug(f"Killed {self.command[0]} (pid {process.pid})")
            raise

        error_output = stderr.decode('utf-8', errors='replace')
        if process.returncode != 0:
            kind = classify_error_output(error_output, process.returncode)
            raise GenerationError(kind, error_output, exit_code=process.returncode)

        if error_output.strip():
            logger.debug(f"{self.command[0]} stderr: {error_output.strip()[:200]}")

        return stdout.decode('utf-8', errors='replace').strip()

    async def health_check(self) -> bool:
        """Check the tool is on PATH."""
        return shutil.which(self.command[0]) is not None
