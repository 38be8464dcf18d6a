"""Thin wrappers around external tool invocations."""

import asyncio
import subprocess
from dataclasses import dataclass

from remuxarr.utils.logger import get_logger

logger = get_logger(__name__)

# Exit code reported when a tool could not be started or was killed on timeout
FAILED_TO_RUN = -1


@dataclass
class ToolResult:
    """Outcome of one external tool run."""

    command: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and not self.timed_out


def run_tool(cmd: list[str], timeout: int) -> ToolResult:
    """Run a tool to completion, capturing its output.

    Never raises for tool failures: a missing binary or a timeout is reported
    through the returned result.
    """
    logger.debug("Executing tool", command=cmd)

    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        logger.error("Tool timeout", tool=cmd[0], timeout=timeout)
        return ToolResult(
            command=cmd,
            returncode=FAILED_TO_RUN,
            stdout=_as_text(e.stdout),
            stderr=_as_text(e.stderr),
            timed_out=True,
        )
    except OSError as e:
        logger.error("Failed to start tool", tool=cmd[0], error=str(e))
        return ToolResult(command=cmd, returncode=FAILED_TO_RUN, stderr=str(e))

    return ToolResult(
        command=cmd,
        returncode=result.returncode,
        stdout=result.stdout or "",
        stderr=result.stderr or "",
    )


async def run_tool_async(cmd: list[str], timeout: int) -> ToolResult:
    """Async variant of :func:`run_tool`; the process is killed on timeout."""
    logger.debug("Executing tool", command=cmd)

    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        logger.error("Failed to start tool", tool=cmd[0], error=str(e))
        return ToolResult(command=cmd, returncode=FAILED_TO_RUN, stderr=str(e))

    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        logger.error("Tool timeout", tool=cmd[0], timeout=timeout)
        try:
            process.kill()
        except ProcessLookupError:
            pass  # Exited on its own
        await process.wait()
        return ToolResult(command=cmd, returncode=FAILED_TO_RUN, timed_out=True)

    return ToolResult(
        command=cmd,
        returncode=process.returncode if process.returncode is not None else FAILED_TO_RUN,
        stdout=_as_text(stdout),
        stderr=_as_text(stderr),
    )


def _as_text(output) -> str:
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode("utf-8", errors="replace")
    return output
