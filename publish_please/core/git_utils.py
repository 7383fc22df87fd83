"""
Git integration utilities for the publish validations.

Provides read-only git queries for:
- Current branch name (including detached HEAD)
- Tag pointing at the latest commit
- Working tree status (uncommitted changes, untracked files)

The core never mutates the repository; only user scripts do.

Error handling:
- GitNotInstalledError when the git binary is missing
- GitTimeoutError when a command hangs
- GitError for any other failure worth surfacing
"""

import logging
import shutil
import subprocess
from pathlib import Path
from typing import List, Optional, Tuple

from .base import PublishPleaseError


logger = logging.getLogger(__name__)


class GitError(PublishPleaseError):
    """Base exception for git-related errors."""
    pass


class GitNotInstalledError(GitError):
    """Git is not installed or not in PATH (GIT-04)."""
    pass


class GitTimeoutError(GitError):
    """Git operation timed out (GIT-06)."""
    pass


def _check_git_installed() -> bool:
    """Check if git is installed and accessible."""
    return shutil.which('git') is not None


def _run_git_command(
    cmd: List[str],
    cwd: Path,
    timeout: int = 30,
    operation_name: str = "git operation"
) -> Tuple[bool, str, str]:
    """
    Run a git command with proper error handling.

    Args:
        cmd: Command list to run
        cwd: Working directory
        timeout: Timeout in seconds
        operation_name: Description of operation for error messages

    Returns:
        Tuple of (success, stdout, stderr)

    Raises:
        GitNotInstalledError: If git is not installed (GIT-04)
        GitTimeoutError: If command times out (GIT-06)
    """
    if not _check_git_installed():
        raise GitNotInstalledError(
            "Git is not installed or not in PATH. "
            "Install git: https://git-scm.com/downloads"
        )

    logger.debug(f"Running {' '.join(cmd)}", extra={'operation': operation_name})

    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout
        )
        return result.returncode == 0, result.stdout, result.stderr
    except subprocess.TimeoutExpired as e:
        msg = f"Git {operation_name} timed out after {timeout}s."
        logger.error(msg, extra={'error_code': 'GIT-06'})
        raise GitTimeoutError(msg) from e
    except FileNotFoundError as e:
        raise GitNotInstalledError(f"Git command not found: {e}") from e
    except PermissionError as e:
        msg = f"Permission denied executing git: {e}"
        logger.error(msg)
        return False, "", msg


def current_branch(repo_root: Path) -> str:
    """
    Get the name of the checked out branch.

    Parses `git branch` rather than `git rev-parse --abbrev-ref HEAD` so a
    detached HEAD is reported the way git shows it, e.g.
    "(HEAD detached at 15a1ef7)".

    Args:
        repo_root: Path inside the git repository

    Returns:
        Branch name, or git's description of a detached HEAD

    Raises:
        GitError: If git fails or no branch is checked out
    """
    success, stdout, stderr = _run_git_command(
        ['git', 'branch', '--no-color'],
        cwd=repo_root,
        timeout=10,
        operation_name="branch"
    )
    if not success:
        raise GitError(f"Cannot get current branch: {stderr.strip()}")

    for line in stdout.splitlines():
        if line.startswith('* '):
            return line[2:].strip()

    raise GitError("Cannot get current branch: no branch is checked out.")


def head_tag(repo_root: Path) -> Optional[str]:
    """
    Get the tag pointing at HEAD.

    Args:
        repo_root: Path inside the git repository

    Returns:
        Tag name, or None if the latest commit is not tagged
    """
    success, stdout, stderr = _run_git_command(
        ['git', 'describe', '--exact-match', '--tags', 'HEAD'],
        cwd=repo_root,
        timeout=10,
        operation_name="describe"
    )
    if not success:
        logger.debug(f"No tag on HEAD: {stderr.strip()}")
        return None

    tag = stdout.strip()
    return tag or None


def has_uncommitted_changes(repo_root: Path) -> bool:
    """
    Check for modified, staged or deleted tracked files.

    Untracked files are ignored here; see has_untracked_files().

    Raises:
        GitError: If git status fails
    """
    success, stdout, stderr = _run_git_command(
        ['git', 'status', '--porcelain', '--untracked-files=no'],
        cwd=repo_root,
        timeout=10,
        operation_name="status"
    )
    if not success:
        raise GitError(f"Cannot get working tree status: {stderr.strip()}")
    return bool(stdout.strip())


def has_untracked_files(repo_root: Path) -> bool:
    """
    Check for files that are neither tracked nor ignored.

    Raises:
        GitError: If git ls-files fails
    """
    success, stdout, stderr = _run_git_command(
        ['git', 'ls-files', '--others', '--exclude-standard'],
        cwd=repo_root,
        timeout=10,
        operation_name="ls-files"
    )
    if not success:
        raise GitError(f"Cannot list untracked files: {stderr.strip()}")
    return bool(stdout.strip())
