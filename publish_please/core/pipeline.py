"""
Validation pipeline.

Runs every registered validation once, in registration order, and folds the
results into a PipelineResult. A failing validation never stops the ones
after it: the operator gets the full list of problems in one pass.

Per validation:
1. resolved value exactly False        -> SKIPPED (not even capability-checked)
2. can_run() is False                  -> UNSUPPORTED(why_cannot_run())
3. run() returns messages or raises    -> FAILED
4. otherwise                           -> PASSED
"""

import logging
from typing import Any, Iterable, Mapping, Optional, Sequence, Tuple

from .base import (
    PipelineResult,
    Validation,
    ValidationContext,
    ValidationFailure,
    ValidationOutcome,
)
from .logger import ValidationLogger


logger = logging.getLogger(__name__)


def check_unique_keys(validations: Iterable[Validation]) -> Tuple[Validation, ...]:
    """
    Freeze a registry into a tuple.

    Raises:
        ValueError: If two validations share a key
    """
    registry = tuple(validations)
    seen = set()
    for validation in registry:
        if validation.key in seen:
            raise ValueError(f"Duplicate validation key: {validation.key!r}")
        seen.add(validation.key)
    return registry


class ValidationPipeline:
    """
    Serial runner for a validation registry.

    Args:
        validations: Registered validations, in the order they must run
        reporter: Optional reporter; receives report_step(outcome) per validation
    """

    def __init__(self, validations: Sequence[Validation], reporter=None):
        self.validations = check_unique_keys(validations)
        self.reporter = reporter

    def run_validation(self, validation: Validation, value: Any, context: ValidationContext) -> ValidationOutcome:
        """Run a single validation and classify its result."""
        vlog = ValidationLogger(validation.key)

        if value is False:
            vlog.debug("Disabled in configuration")
            return ValidationOutcome.skipped(validation)

        if not validation.can_run():
            reason = validation.why_cannot_run()
            vlog.warning(f"Cannot run: {reason}")
            return ValidationOutcome.unsupported(validation, reason)

        options = True if value is None else value
        vlog.operation_start(validation.status_text)
        try:
            errors = list(validation.run(options, context) or [])
        except ValidationFailure as failure:
            errors = failure.messages
        except Exception as e:
            vlog.error(f"Exception: {e}", error_code='WF-02')
            errors = [str(e)]

        vlog.operation_complete(validation.status_text, success=not errors)
        if errors:
            return ValidationOutcome.failed(validation, errors)
        return ValidationOutcome.passed(validation)

    def run(self, validation_options: Optional[Mapping[str, Any]], context: ValidationContext) -> PipelineResult:
        """
        Run all validations.

        Args:
            validation_options: Resolved "validations" options keyed by
                validation key; a missing key means the descriptor default
            context: Project directory and package metadata

        Returns:
            PipelineResult with one outcome per registered validation
        """
        validation_options = validation_options or {}
        result = PipelineResult()

        for validation in self.validations:
            value = validation_options.get(validation.key, validation.default_enabled)
            outcome = self.run_validation(validation, value, context)
            result.outcomes.append(outcome)
            if self.reporter is not None:
                self.reporter.report_step(outcome)

        logger.info(
            f"Validations finished: {len(result.failed_outcomes)} of "
            f"{len(result.outcomes)} blocking"
        )
        return result
