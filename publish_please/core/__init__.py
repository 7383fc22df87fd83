"""
publish-please core - invocation detection, validation contract, pipeline
and the git/npm/config collaborators the validations and workflow use.
"""

from .base import (
    OutcomeStatus,
    PipelineResult,
    PublishPleaseError,
    Validation,
    ValidationContext,
    ValidationFailure,
    ValidationOutcome,
)
from .invocation import InvocationContext, Subcommand, detect
from .pipeline import ValidationPipeline
from .config import (
    ConfigError,
    ConfigValidationError,
    ValidationResult,
    get_options,
    save_options,
    validate_options,
)
from .reporting import (
    CIReporter,
    ElegantReporter,
    Reporter,
    generate_json_report,
    select_reporter,
)

__all__ = [
    # Contract
    'OutcomeStatus',
    'PipelineResult',
    'PublishPleaseError',
    'Validation',
    'ValidationContext',
    'ValidationFailure',
    'ValidationOutcome',

    # Invocation
    'InvocationContext',
    'Subcommand',
    'detect',

    # Pipeline
    'ValidationPipeline',

    # Config
    'ConfigError',
    'ConfigValidationError',
    'ValidationResult',
    'get_options',
    'save_options',
    'validate_options',

    # Reporting
    'CIReporter',
    'ElegantReporter',
    'Reporter',
    'generate_json_report',
    'select_reporter',
]
