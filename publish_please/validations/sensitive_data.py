"""
Sensitive data validation.

Lists the files `npm pack` would publish and flags the ones that look like
secrets or build leftovers (archives, keys, logs, local databases...).

The pattern list is DEFAULT_SENSITIVE_PATTERNS unless the project has a
.sensitivedata file, which replaces it (one glob per line, # comments).
Operator "ignore" globs remove individual files from the findings:

    "sensitiveData": {"ignore": ["lib/schema.rb", "lib/*.keychain"]}

Glob semantics are fnmatch's. A pattern without "/" is matched against the
file name, a pattern with "/" against the whole package-relative path.
"""

from fnmatch import fnmatchcase
from pathlib import Path, PurePosixPath
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from ..core import npm_utils
from ..core.base import Validation, ValidationContext
from ..core.logger import ValidationLogger
from ..core.npm_utils import NpmInfo, PACK_JSON_MIN_VERSION


SENSITIVE_DATA_FILE = '.sensitivedata'

DEFAULT_SENSITIVE_PATTERNS = (
    # archives
    '*.tgz', '*.tar', '*.tar.gz', '*.zip', '*.rar', '*.7z',
    # keys and certificates
    '*.pem', '*.key', '*.p12', '*.pfx', '*.keychain', '*.keystore', '*.jks',
    'id_rsa', 'id_rsa.pub', 'id_dsa', 'id_ecdsa', 'id_ed25519',
    # credentials and environment
    '.env', '.env.*', '.npmrc', '.netrc', '.htpasswd', 'credentials.json',
    # databases
    'schema.rb', 'database.yml', '*.sqlite', '*.sqlite3', '*.db', '*.sql',
    # logs and editor leftovers
    '*.log', '.DS_Store', '*.swp', '*.orig',
    # build and tooling output
    'coverage/*', '.nyc_output/*', '.idea/*', '.vscode/*', '.travis.yml', '.gitlab-ci.yml',
)


def load_sensitive_patterns(project_dir: Path) -> List[str]:
    """Project patterns from .sensitivedata, or the defaults when it is absent."""
    path = Path(project_dir) / SENSITIVE_DATA_FILE
    if not path.is_file():
        return list(DEFAULT_SENSITIVE_PATTERNS)
    return [line for line in npm_utils.read_lines(path) if not line.startswith('#')]


def matches_any(file_path: str, patterns: Iterable[str]) -> bool:
    name = PurePosixPath(file_path).name
    for pattern in patterns:
        target = file_path if '/' in pattern else name
        if fnmatchcase(target, pattern):
            return True
    return False


def find_sensitive_files(files: Iterable[str], patterns: Sequence[str], ignore: Sequence[str] = ()) -> List[str]:
    """
    Files matching a sensitive pattern and no ignore glob, sorted.
    """
    return sorted({
        file_path for file_path in files
        if matches_any(file_path, patterns) and not matches_any(file_path, ignore)
    })


class SensitiveDataValidation(Validation):
    """
    Fails with one message per sensitive file found in the npm package.

    Args:
        npm_info: npm capabilities (detected on first use when omitted)
    """

    key = 'sensitiveData'
    status_text = 'Checking for the sensitive and non-essential data in the npm package'
    default_enabled = True

    def __init__(self, npm_info: Optional[NpmInfo] = None):
        self._npm_info = npm_info

    @property
    def npm_info(self) -> NpmInfo:
        if self._npm_info is None:
            self._npm_info = npm_utils.get_npm_info()
        return self._npm_info

    def can_run(self) -> bool:
        return self.npm_info.pack_has_json_reporter

    def why_cannot_run(self) -> str:
        return (
            f"Cannot check sensitive and non-essential data because npm version is "
            f"{self.npm_info.version}. Either upgrade npm to version {PACK_JSON_MIN_VERSION} "
            f"or above, or disable this validation in the configuration file"
        )

    def configure(self, current_value: Any, prompter) -> Any:
        enabled = prompter.confirm(
            'Would you like to verify that there is no sensitive and non-essential data in the npm package?',
            default=current_value is not False
        )
        if enabled and isinstance(current_value, Mapping):
            return current_value
        return enabled

    def run(self, options: Any, context: ValidationContext) -> List[str]:
        ignore: Sequence[str] = ()
        if isinstance(options, Mapping):
            ignore = list(options.get('ignore', ()))

        vlog = ValidationLogger(self.key)
        patterns = load_sensitive_patterns(context.project_dir)
        files = npm_utils.packed_files(context.project_dir)
        vlog.debug(f"{len(files)} files in package, {len(patterns)} patterns, {len(ignore)} ignored")

        return [
            f"Sensitive or non essential data found in npm package: {file_path}"
            for file_path in find_sensitive_files(files, patterns, ignore)
        ]
