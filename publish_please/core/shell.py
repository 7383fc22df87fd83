"""
Execution of user-supplied shell commands.

Pre-publish scripts, post-publish scripts and the publish command itself
are free-form shell strings taken from the configuration. They run in the
project directory with the parent's stdout/stderr so the operator sees
their output live.
"""

import logging
import shlex
import subprocess
from pathlib import Path
from typing import Optional

from .base import PublishPleaseError


logger = logging.getLogger(__name__)


class ScriptError(PublishPleaseError):
    """A shell command exited with a non-zero code."""

    def __init__(self, command: str, exit_code: int):
        self.command = command
        self.exit_code = exit_code
        super().__init__(f"Command `{program_name(command)}` exited with code {exit_code}.")


def program_name(command: str) -> str:
    """First word of a shell command ('npm run unknown' -> 'npm')."""
    try:
        words = shlex.split(command)
    except ValueError:
        words = command.split()
    return words[0] if words else command


def run_script(command: str, cwd: Path, env: Optional[dict] = None) -> None:
    """
    Run a shell command and wait for it to finish.

    Args:
        command: Shell command line
        cwd: Working directory
        env: Environment for the child (defaults to the current one)

    Raises:
        ScriptError: If the command exits with a non-zero code (SCR-01)
    """
    logger.debug(f"Running `{command}` in {cwd}", extra={'operation': 'script'})

    try:
        result = subprocess.run(command, shell=True, cwd=cwd, env=env)
    except OSError as e:
        logger.error(f"Cannot start `{command}`: {e}", extra={'error_code': 'SCR-01'})
        raise ScriptError(command, 127) from e

    if result.returncode != 0:
        logger.error(
            f"`{command}` exited with code {result.returncode}",
            extra={'error_code': 'SCR-01'}
        )
        raise ScriptError(command, result.returncode)
