"""
Command execution utilities for Travel Router.

This module provides command execution with error handling and logging.
It serves as the central location for all command execution so that every
call to nmcli, nordvpn, systemctl and friends is logged the same way.
"""

import shlex
import subprocess
from typing import NamedTuple

from ..logging_config import get_logger

logger = get_logger(__name__)

COMMAND_NOT_FOUND = 127


class CommandResult(NamedTuple):
    """Outcome of a single external command."""

    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        """Combined stdout and stderr, as an operator would see it in a terminal."""
        return "\n".join(part for part in (self.stdout, self.stderr) if part).strip()


def run_command(command, input=None, timeout=None, quiet_on_error=False):
    """
    Execute a command and return its result without raising on failure.

    Args:
        command: Command to execute as a list of strings
        input: Optional input to send to the command's stdin
        timeout: Optional timeout in seconds
        quiet_on_error: If True, log expected failures at a lower verbosity

    Returns:
        CommandResult with the exit status and stripped stdout/stderr.
        A missing binary yields returncode 127, a timeout returncode -1.
    """
    logger.debug(f"Running command: {shlex.join(command)}")

    try:
        result = subprocess.run(
            command,
            check=False,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="ignore",
            input=input,
            timeout=timeout,
        )
    except FileNotFoundError:
        logger.error(f"Command not found: {command[0]}")
        return CommandResult(COMMAND_NOT_FOUND, "", f"{command[0]}: command not found")
    except subprocess.TimeoutExpired:
        logger.debug(f"Command '{shlex.join(command)}' timed out after {timeout}s")
        return CommandResult(-1, "", f"{command[0]}: timed out after {timeout}s")

    stdout = (result.stdout or "").strip()
    stderr = (result.stderr or "").strip()

    if result.returncode != 0:
        if quiet_on_error:
            logger.debug(f"Command '{command[0]}' failed (expected)")
        else:
            logger.debug(f"Command '{shlex.join(command)}' failed with status {result.returncode}")
            if stdout:
                logger.debug(f"Stdout: {stdout}")
            if stderr:
                logger.debug(f"Stderr: {stderr}")
    elif stderr:
        logger.debug(f"Command succeeded with stderr: {stderr}")

    return CommandResult(result.returncode, stdout, stderr)
