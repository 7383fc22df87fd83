"""
npm integration utilities.

Wraps the npm CLI for:
- Version detection and the capabilities that depend on it
- Reading package.json
- Listing the files `npm pack` would publish
- Running `npm audit --json`, honoring .auditignore and audit.opts

Capabilities by npm version:
- npm pack --json          >= 5.9.0  (sensitive data validation)
- npm audit --json         >= 6.1.0  (vulnerable dependencies validation)
- prepublishOnly lifecycle >= 5.0.0  (guard hook name)
"""

import json
import logging
import shlex
import shutil
import subprocess
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .base import PublishPleaseError


logger = logging.getLogger(__name__)

PACKAGE_JSON = 'package.json'
LOCK_FILES = ('package-lock.json', 'npm-shrinkwrap.json')
AUDIT_IGNORE_FILE = '.auditignore'
AUDIT_OPTIONS_FILE = 'audit.opts'

PACK_JSON_MIN_VERSION = '5.9.0'
AUDIT_JSON_MIN_VERSION = '6.1.0'
PREPUBLISH_ONLY_MIN_VERSION = '5.0.0'


class NpmError(PublishPleaseError):
    """Base exception for npm-related errors."""
    pass


class NpmNotInstalledError(NpmError):
    """npm is not installed or not in PATH (NPM-01)."""
    pass


class NpmTimeoutError(NpmError):
    """npm command timed out (NPM-04)."""
    pass


def parse_version(version: str) -> Tuple[int, int, int]:
    """
    Parse "major.minor.patch" into a comparable tuple.

    Pre-release and build suffixes are ignored ("7.0.0-beta.1" -> (7, 0, 0)).
    Missing or non-numeric parts count as 0.
    """
    core = version.strip().lstrip('v').split('-')[0].split('+')[0]
    parts: List[int] = []
    for piece in core.split('.')[:3]:
        digits = ''.join(ch for ch in piece if ch.isdigit())
        parts.append(int(digits) if digits else 0)
    while len(parts) < 3:
        parts.append(0)
    return parts[0], parts[1], parts[2]


def version_gte(version: Optional[str], minimum: str) -> bool:
    """True if version >= minimum. An unknown version never qualifies."""
    if not version:
        return False
    return parse_version(version) >= parse_version(minimum)


@dataclass(frozen=True)
class NpmInfo:
    """
    Installed npm version and the capabilities derived from it.

    Attributes:
        version: npm version string, or None if npm is unavailable
    """
    version: Optional[str] = None

    @property
    def pack_has_json_reporter(self) -> bool:
        return version_gte(self.version, PACK_JSON_MIN_VERSION)

    @property
    def audit_has_json_reporter(self) -> bool:
        return version_gte(self.version, AUDIT_JSON_MIN_VERSION)

    @property
    def should_use_prepublish_only_script(self) -> bool:
        return version_gte(self.version, PREPUBLISH_ONLY_MIN_VERSION)

    @property
    def prepublish_hook(self) -> str:
        """Lifecycle script npm runs before publishing."""
        return 'prepublishOnly' if self.should_use_prepublish_only_script else 'prepublish'


def _run_npm_command(
    args: List[str],
    cwd: Path,
    timeout: int = 120,
    operation_name: str = "npm operation"
) -> Tuple[int, str, str]:
    """
    Run an npm command and capture its output.

    Args:
        args: Arguments after "npm"
        cwd: Working directory
        timeout: Timeout in seconds
        operation_name: Description of operation for error messages

    Returns:
        Tuple of (exit code, stdout, stderr)

    Raises:
        NpmNotInstalledError: If npm is not installed (NPM-01)
        NpmTimeoutError: If the command times out (NPM-04)
    """
    npm = shutil.which('npm')
    if npm is None:
        raise NpmNotInstalledError(
            "npm is not installed or not in PATH. "
            "Install Node.js: https://nodejs.org"
        )

    cmd = [npm] + args
    logger.debug(f"Running npm {' '.join(args)}", extra={'operation': operation_name})

    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout
        )
    except subprocess.TimeoutExpired as e:
        msg = f"npm {operation_name} timed out after {timeout}s."
        logger.error(msg, extra={'error_code': 'NPM-04'})
        raise NpmTimeoutError(msg) from e
    except FileNotFoundError as e:
        raise NpmNotInstalledError(f"npm command not found: {e}") from e

    return result.returncode, result.stdout, result.stderr


@lru_cache(maxsize=1)
def get_npm_info() -> NpmInfo:
    """
    Detect the installed npm version (cached for the process lifetime).

    Returns:
        NpmInfo; version is None when npm cannot be run
    """
    try:
        code, stdout, stderr = _run_npm_command(
            ['--version'],
            cwd=Path.cwd(),
            timeout=30,
            operation_name="version check"
        )
    except NpmError as e:
        logger.warning(f"Cannot detect npm version: {e}", extra={'error_code': 'NPM-01'})
        return NpmInfo()

    if code != 0:
        logger.warning(f"npm --version exited with code {code}: {stderr.strip()}")
        return NpmInfo()

    return NpmInfo(version=stdout.strip() or None)


def read_package_json(project_dir: Path) -> Dict[str, Any]:
    """
    Read and parse package.json.

    Raises:
        FileNotFoundError: If package.json does not exist
        NpmError: If package.json is not valid JSON
    """
    path = Path(project_dir) / PACKAGE_JSON
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise NpmError(f"{PACKAGE_JSON} is not a valid JSON file: line {e.lineno}: {e.msg}") from e

    if not isinstance(data, dict):
        raise NpmError(f"{PACKAGE_JSON} must contain a JSON object.")
    return data


def artifact_name(package: Dict[str, Any]) -> str:
    """
    File name `npm pack` produces for a package.

    Example:
        >>> artifact_name({'name': '@scope/lib', 'version': '1.0.0'})
        'scope-lib-1.0.0.tgz'
    """
    name = str(package.get('name', '')).lstrip('@').replace('/', '-')
    return f"{name}-{package.get('version', '')}.tgz"


def _parse_json_output(stdout: str, operation_name: str) -> Any:
    try:
        return json.loads(stdout)
    except json.JSONDecodeError as e:
        logger.error(f"Cannot parse {operation_name} output", extra={'error_code': 'NPM-03'})
        raise NpmError(f"Cannot parse the output of {operation_name}: {e.msg}") from e


def packed_files(project_dir: Path) -> List[str]:
    """
    List the files `npm pack` would put in the published tarball.

    Returns:
        Relative POSIX paths, in npm's order

    Raises:
        NpmError: If npm pack fails or prints unparseable output
    """
    code, stdout, stderr = _run_npm_command(
        ['pack', '--dry-run', '--json'],
        cwd=project_dir,
        operation_name="npm pack"
    )
    if code != 0:
        raise NpmError(f"npm pack exited with code {code}: {stderr.strip()}")

    data = _parse_json_output(stdout, "npm pack")
    if isinstance(data, list):
        data = data[0] if data else {}
    if not isinstance(data, dict):
        raise NpmError("Unexpected npm pack output.")

    return [str(entry.get('path', '')) for entry in data.get('files', []) if entry.get('path')]


def read_lines(path: Path) -> List[str]:
    """Non-empty, stripped lines of a text file; empty list if it is missing."""
    if not path.exists():
        return []
    return [line.strip() for line in path.read_text(encoding='utf-8').splitlines() if line.strip()]


def read_audit_ignore(project_dir: Path) -> List[str]:
    """Advisory URLs listed in .auditignore, one per line."""
    return read_lines(Path(project_dir) / AUDIT_IGNORE_FILE)


def read_audit_options(project_dir: Path) -> List[str]:
    """
    Extra `npm audit` arguments from audit.opts.

    Example audit.opts:
        --audit-level=high
        --omit=dev
    """
    options: List[str] = []
    for line in read_lines(Path(project_dir) / AUDIT_OPTIONS_FILE):
        if line.startswith('#'):
            continue
        options.extend(shlex.split(line))
    return options


def filter_ignored_advisories(report: Dict[str, Any], ignored_urls: Iterable[str]) -> Dict[str, Any]:
    """
    Remove advisories listed in .auditignore from an audit report.

    An advisory is dropped from every vulnerability's "via" list when its url
    is ignored. A vulnerability with nothing left in "via" is dropped too, and
    so are vulnerabilities that only pointed at dropped ones.

    Args:
        report: Parsed `npm audit --json` output
        ignored_urls: Advisory URLs to suppress

    Returns:
        New report; the input is not modified
    """
    ignored = set(ignored_urls)
    vulnerabilities = report.get('vulnerabilities')
    if not ignored or not isinstance(vulnerabilities, dict):
        return report

    remaining: Dict[str, Dict[str, Any]] = {}
    for name, vulnerability in vulnerabilities.items():
        via = [
            entry for entry in vulnerability.get('via', [])
            if not (isinstance(entry, dict) and entry.get('url') in ignored)
        ]
        remaining[name] = {**vulnerability, 'via': via}

    changed = True
    while changed:
        changed = False
        for name, vulnerability in list(remaining.items()):
            via = [
                entry for entry in vulnerability['via']
                if isinstance(entry, dict) or entry in remaining
            ]
            if not via:
                del remaining[name]
                changed = True
            elif len(via) != len(vulnerability['via']):
                remaining[name] = {**vulnerability, 'via': via}
                changed = True

    return {**report, 'vulnerabilities': remaining}


def audit(project_dir: Path) -> Dict[str, Any]:
    """
    Run `npm audit --json` for a project.

    When the project has no lockfile, one is generated with
    `npm install --package-lock-only` for the audit and removed afterwards
    so later validations see an untouched working tree.

    Args:
        project_dir: Directory holding package.json

    Returns:
        Parsed audit report with .auditignore advisories removed. Tool
        failures are reported by npm itself under the "error" key.

    Raises:
        NpmError: If npm cannot be run or its output is not JSON
    """
    project_dir = Path(project_dir)
    generated_lock: Optional[Path] = None

    if not any((project_dir / name).exists() for name in LOCK_FILES):
        generated_lock = project_dir / LOCK_FILES[0]
        code, _, stderr = _run_npm_command(
            ['install', '--package-lock-only', '--no-audit', '--no-fund', '--ignore-scripts'],
            cwd=project_dir,
            operation_name="lockfile generation"
        )
        if code != 0:
            logger.warning(f"Cannot generate a lockfile: {stderr.strip()}")

    try:
        code, stdout, stderr = _run_npm_command(
            ['audit', '--json'] + read_audit_options(project_dir),
            cwd=project_dir,
            operation_name="npm audit"
        )
    finally:
        if generated_lock is not None and generated_lock.exists():
            generated_lock.unlink()

    # npm audit exits non-zero when it finds vulnerabilities
    if not stdout.strip():
        raise NpmError(f"npm audit exited with code {code}: {stderr.strip()}")

    report = _parse_json_output(stdout, "npm audit")
    if not isinstance(report, dict):
        raise NpmError("Unexpected npm audit output.")

    return filter_ignored_advisories(report, read_audit_ignore(project_dir))
