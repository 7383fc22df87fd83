"""
Core abstractions for the publish-please validation system.

Every pre-publish check is a Validation subclass registered in
publish_please.validations. The pipeline only depends on the contract
declared here:

- key / status_text / default_enabled class attributes
- can_run() / why_cannot_run() capability check
- configure() interactive configurator
- run() returning a list of error messages (empty list means passed)

Failures are standardized on two shapes:
- a list of strings returned by run()
- a ValidationFailure raised from run() or from a collaborator it calls
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union


class PublishPleaseError(Exception):
    """Base class for fatal errors that abort the publishing workflow."""
    pass


class ValidationFailure(Exception):
    """
    Raised when a validation finds one or more problems.

    Carries either a single message or an ordered list of messages.
    The pipeline converts it into a FAILED outcome; it never escapes
    the pipeline boundary.

    Attributes:
        messages: Ordered list of error messages
    """

    def __init__(self, messages: Union[str, Sequence[str]]):
        if isinstance(messages, str):
            self.messages = [messages]
        else:
            self.messages = [str(message) for message in messages]
        super().__init__('\n'.join(self.messages))


class OutcomeStatus(Enum):
    """Result status of a single validation."""
    SKIPPED = 'skipped'
    UNSUPPORTED = 'unsupported'
    PASSED = 'passed'
    FAILED = 'failed'


@dataclass(frozen=True)
class ValidationOutcome:
    """
    Result of one validation within a pipeline run.

    Attributes:
        key: Option key of the validation
        status_text: Human status line of the validation
        status: One of OutcomeStatus
        errors: Error messages (FAILED only)
        reason: Why the validation was skipped or could not run
    """
    key: str
    status_text: str
    status: OutcomeStatus
    errors: Tuple[str, ...] = ()
    reason: str = ''

    @classmethod
    def skipped(cls, validation: 'Validation', reason: str = 'Disabled in configuration') -> 'ValidationOutcome':
        return cls(validation.key, validation.status_text, OutcomeStatus.SKIPPED, reason=reason)

    @classmethod
    def unsupported(cls, validation: 'Validation', reason: str) -> 'ValidationOutcome':
        return cls(validation.key, validation.status_text, OutcomeStatus.UNSUPPORTED, reason=reason)

    @classmethod
    def passed(cls, validation: 'Validation') -> 'ValidationOutcome':
        return cls(validation.key, validation.status_text, OutcomeStatus.PASSED)

    @classmethod
    def failed(cls, validation: 'Validation', errors: Sequence[str]) -> 'ValidationOutcome':
        return cls(validation.key, validation.status_text, OutcomeStatus.FAILED, errors=tuple(errors))

    @property
    def is_blocking(self) -> bool:
        """FAILED and UNSUPPORTED outcomes both block the release."""
        return self.status in (OutcomeStatus.FAILED, OutcomeStatus.UNSUPPORTED)

    @property
    def messages(self) -> List[str]:
        """Lines this outcome contributes to the error report."""
        if self.status == OutcomeStatus.FAILED:
            return list(self.errors)
        if self.status == OutcomeStatus.UNSUPPORTED:
            return [self.reason]
        return []


@dataclass
class PipelineResult:
    """
    Aggregated result of a validation pipeline run.

    Outcomes keep registration order, which is also the order of the
    sections in the final error report.
    """
    outcomes: List[ValidationOutcome] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """True only when no outcome is FAILED or UNSUPPORTED."""
        return not any(outcome.is_blocking for outcome in self.outcomes)

    @property
    def failed_outcomes(self) -> List[ValidationOutcome]:
        return [outcome for outcome in self.outcomes if outcome.is_blocking]

    @property
    def errors(self) -> List[str]:
        """Order-preserving concatenation of every blocking outcome's messages."""
        errors: List[str] = []
        for outcome in self.failed_outcomes:
            errors.extend(outcome.messages)
        return errors

    def outcome_for(self, key: str) -> Optional[ValidationOutcome]:
        for outcome in self.outcomes:
            if outcome.key == key:
                return outcome
        return None


@dataclass
class ValidationContext:
    """
    Execution context handed to every validation run.

    Attributes:
        project_dir: Directory holding package.json
        package: Parsed package.json contents
        path_formatter: Renders a dependency path for messages
            (supplied by the active reporter)
    """
    project_dir: Path
    package: Dict[str, Any] = field(default_factory=dict)
    path_formatter: Any = None

    @property
    def package_name(self) -> str:
        return str(self.package.get('name', ''))

    @property
    def package_version(self) -> str:
        return str(self.package.get('version', ''))

    def format_path(self, path: str, separator: str = '/') -> str:
        if self.path_formatter is None:
            return ' -> '.join(part for part in path.split(separator) if part)
        return self.path_formatter(path, separator)


class Validation(ABC):
    """
    Base class for all pre-publish validations.

    Subclasses set the class attributes and implement configure() and run().
    Validations that depend on a tool capability override can_run() and
    why_cannot_run().

    Class attributes:
        key: Unique option key, used in .publishrc under "validations"
        status_text: Line shown while the validation runs
        default_enabled: Default option value (False disables the validation)
    """

    key: str = ''
    status_text: str = ''
    default_enabled: Any = True

    def can_run(self) -> bool:
        """Check whether the validation prerequisites are met."""
        return True

    def why_cannot_run(self) -> str:
        """Explain why can_run() returned False."""
        return ''

    @abstractmethod
    def configure(self, current_value: Any, prompter) -> Any:
        """
        Ask the operator for a new option value.

        Args:
            current_value: Value currently stored in the configuration
            prompter: Object exposing confirm(question, default) and
                input(question, default)

        Returns:
            New option value
        """
        pass

    @abstractmethod
    def run(self, options: Any, context: ValidationContext) -> List[str]:
        """
        Execute the validation.

        Args:
            options: Resolved option value (True or a structured value)
            context: Project directory and package metadata

        Returns:
            Error messages; an empty list means the validation passed

        Raises:
            ValidationFailure: Alternative way to report errors
        """
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(key={self.key!r})"
