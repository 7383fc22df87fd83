"""
Invocation context detection.

npm exposes the command that launched a lifecycle script through
environment variables:

- npm_command: the active subcommand (install, publish, run-script, exec)
- npm_config_<flag>: "true" for every boolean flag given on the command line
  (--save-dev becomes npm_config_save_dev)

detect() turns an environment snapshot into an immutable InvocationContext.
It never raises: a missing or malformed environment yields the empty context.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Mapping, Optional


logger = logging.getLogger(__name__)

COMMAND_KEY = 'npm_command'
FLAG_PREFIX = 'npm_config_'
TRUTHY = 'true'

TRUSTED_RELEASE_FLAG = 'with-publish-please'

KNOWN_FLAGS = (
    'save-dev',
    'save',
    'global',
    'dry-run',
    'ci',
    'config',
    TRUSTED_RELEASE_FLAG,
)


class Subcommand(Enum):
    """npm subcommand that launched the current process."""
    INSTALL = 'install'
    PUBLISH = 'publish'
    RUN_SCRIPT = 'run-script'
    EXEC = 'exec'
    UNKNOWN = 'unknown'

    @classmethod
    def from_value(cls, value: Optional[str]) -> 'Subcommand':
        for member in cls:
            if member.value == value and member is not cls.UNKNOWN:
                return member
        return cls.UNKNOWN


@dataclass(frozen=True)
class InvocationContext:
    """
    Snapshot of how npm was invoked.

    Attributes:
        subcommand: Active npm subcommand
        flags: Names of the boolean flags that were set (e.g. 'dry-run')
    """
    subcommand: Subcommand = Subcommand.UNKNOWN
    flags: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def empty(cls) -> 'InvocationContext':
        return cls()

    def has_flag(self, name: str) -> bool:
        return name in self.flags

    def is_command(self, subcommand: Subcommand) -> bool:
        return self.subcommand is subcommand

    @property
    def is_trusted_release(self) -> bool:
        """True when the release was started by the guarded workflow."""
        return TRUSTED_RELEASE_FLAG in self.flags

    @property
    def is_dry_run(self) -> bool:
        return 'dry-run' in self.flags

    @property
    def is_ci(self) -> bool:
        return 'ci' in self.flags


def env_key_for(flag: str) -> str:
    """Environment variable npm sets for a flag ('dry-run' -> 'npm_config_dry_run')."""
    return FLAG_PREFIX + flag.replace('-', '_')


def detect(env: Optional[Mapping[str, str]]) -> InvocationContext:
    """
    Build an InvocationContext from an environment snapshot.

    Args:
        env: Environment mapping (usually a copy of os.environ)

    Returns:
        Detected context, or the empty context if the snapshot is unusable
    """
    try:
        subcommand = Subcommand.from_value(env.get(COMMAND_KEY))
        flags = frozenset(
            flag for flag in KNOWN_FLAGS
            if env.get(env_key_for(flag)) == TRUTHY
        )
        return InvocationContext(subcommand=subcommand, flags=flags)
    except Exception as e:
        logger.debug(f"Cannot detect npm invocation context: {e}")
        return InvocationContext.empty()
