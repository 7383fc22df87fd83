"""
Validation registry.

default_validations() returns the registered validations in the order the
pipeline runs them and the error report lists them.
"""

from typing import Optional, Tuple

from ..core.base import Validation
from ..core.npm_utils import NpmInfo
from .branch import BranchValidation
from .git_tag import GitTagValidation
from .sensitive_data import SensitiveDataValidation
from .uncommitted_changes import UncommittedChangesValidation
from .untracked_files import UntrackedFilesValidation
from .vulnerable_dependencies import VulnerableDependenciesValidation


VALIDATION_KEYS = (
    VulnerableDependenciesValidation.key,
    SensitiveDataValidation.key,
    UncommittedChangesValidation.key,
    UntrackedFilesValidation.key,
    BranchValidation.key,
    GitTagValidation.key,
)


def default_validations(npm_info: Optional[NpmInfo] = None) -> Tuple[Validation, ...]:
    """
    Build the registry.

    Args:
        npm_info: npm capabilities shared by the npm-backed validations
            (detected lazily when omitted)
    """
    return (
        VulnerableDependenciesValidation(npm_info=npm_info),
        SensitiveDataValidation(npm_info=npm_info),
        UncommittedChangesValidation(),
        UntrackedFilesValidation(),
        BranchValidation(),
        GitTagValidation(),
    )


__all__ = [
    'VALIDATION_KEYS',
    'default_validations',
    'BranchValidation',
    'GitTagValidation',
    'SensitiveDataValidation',
    'UncommittedChangesValidation',
    'UntrackedFilesValidation',
    'VulnerableDependenciesValidation',
]
