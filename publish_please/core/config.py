"""
Option resolution for publish-please.

Options come from three layers, highest precedence first:
1. caller overrides (command line, programmatic use)
2. the project's rc file (.publishrc JSON, or .publishrc.yml / .publishrc.yaml)
3. built-in defaults, validations at their descriptor defaults

The merged options are validated, normalized and frozen. Nothing downstream
can mutate them.

Example .publishrc:
    {
      "confirm": true,
      "publishCommand": "npm publish",
      "publishTag": "latest",
      "prePublishScript": "npm test",
      "postPublishScript": "",
      "validations": {
        "vulnerableDependencies": true,
        "sensitiveData": {"ignore": ["lib/fixtures/*.tgz"]},
        "uncommittedChanges": true,
        "untrackedFiles": true,
        "branch": "/(^master$|^release$)/",
        "gitTag": true
      }
    }
"""

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

import yaml

from .atomic_write import atomic_write
from .base import PublishPleaseError


logger = logging.getLogger(__name__)

RC_FILE = '.publishrc'
RC_FILE_CANDIDATES = (RC_FILE, '.publishrc.yml', '.publishrc.yaml')

DEFAULT_PUBLISH_TAG = 'latest'

STRING_OPTIONS = ('publishCommand', 'publishTag', 'prePublishScript', 'postPublishScript')
BOOLEAN_OPTIONS = ('confirm',)

# Validations whose value may be a string instead of a boolean
STRING_VALIDATIONS = ('branch', 'gitTag')
# Validations whose value may be a mapping instead of a boolean
MAPPING_VALIDATIONS = ('sensitiveData',)


class ConfigError(PublishPleaseError):
    """Configuration error with optional context."""

    def __init__(self, message: str, key: Optional[str] = None, value: Any = None, suggestion: Optional[str] = None):
        self.key = key
        self.value = value
        self.suggestion = suggestion
        full_message = message if key is None else f"Config error at '{key}': {message}"
        if value is not None:
            full_message += f" (got: {value!r})"
        if suggestion:
            full_message += f". Suggestion: {suggestion}"
        super().__init__(full_message)


class ConfigValidationError(ConfigError):
    """
    Raised when option validation fails with one or more errors.
    """

    def __init__(self, errors: List[str], warnings: Optional[List[str]] = None):
        self.errors = errors
        self.warnings = warnings or []
        message = f"Configuration validation failed with {len(errors)} error(s):\n"
        message += "\n".join(f"  - {err}" for err in errors)
        super().__init__(message)


@dataclass
class ValidationResult:
    """Result of option validation."""
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    validated_config: Dict[str, Any] = field(default_factory=dict)

    def __bool__(self) -> bool:
        return self.is_valid

    def raise_if_invalid(self) -> 'ValidationResult':
        """Raise ConfigValidationError if validation failed."""
        if not self.is_valid:
            raise ConfigValidationError(self.errors, self.warnings)
        return self

    def log_warnings(self) -> 'ValidationResult':
        for warning in self.warnings:
            logger.warning(f"Config warning: {warning}", extra={'error_code': 'CFG-03'})
        return self


def default_options() -> Dict[str, Any]:
    """Built-in defaults, with every registered validation at its default value."""
    # Imported here: validations depend on core modules
    from ..validations import default_validations

    return {
        'confirm': True,
        'prePublishScript': 'npm test',
        'postPublishScript': '',
        'publishCommand': 'npm publish',
        'publishTag': DEFAULT_PUBLISH_TAG,
        'validations': {
            validation.key: validation.default_enabled
            for validation in default_validations()
        },
    }


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Merge two option trees. Nested mappings merge key by key; any other
    value in override replaces the one in base. Neither input is modified.
    """
    merged: Dict[str, Any] = dict(base)
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def find_rc_file(project_dir: Path) -> Optional[Path]:
    for name in RC_FILE_CANDIDATES:
        candidate = Path(project_dir) / name
        if candidate.is_file():
            return candidate
    return None


def load_rc_file(project_dir: Path) -> Dict[str, Any]:
    """
    Read the persisted options of a project.

    Returns:
        Parsed options, or {} when the project has no rc file

    Raises:
        ConfigError: If the rc file cannot be parsed or is not a mapping (CFG-01)
    """
    path = find_rc_file(project_dir)
    if path is None:
        logger.debug(f"No rc file in {project_dir}, using defaults")
        return {}

    text = path.read_text(encoding='utf-8')

    if path.name == RC_FILE:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            logger.error(f"{path}: line {e.lineno}: {e.msg}", extra={'error_code': 'CFG-01'})
            raise ConfigError(f"{RC_FILE} is not a valid JSON file.") from e
    else:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            logger.error(f"{path}: {e}", extra={'error_code': 'CFG-01'})
            raise ConfigError(f"{path.name} is not a valid YAML file.") from e
        if data is None:
            data = {}

    if not isinstance(data, dict):
        raise ConfigError(
            f"{path.name} must contain an object",
            key='config',
            value=type(data).__name__
        )

    logger.debug(f"Loaded options from {path}")
    return data


def _check_branch_pattern(value: str, add_error) -> None:
    if len(value) > 1 and value.startswith('/') and value.endswith('/'):
        try:
            re.compile(value[1:-1])
        except re.error as e:
            add_error('validations.branch', f"Invalid regular expression {value}: {e}",
                      "Escape special characters or use a literal branch name")


def validate_options(options: Any) -> ValidationResult:
    """
    Validate merged options and produce their normalized form.

    Normalization:
    - a None validation value becomes False (disabled), with a warning
    - a None or empty publishTag becomes "latest", with a warning
    - None scripts become ""
    - a string "ignore" for sensitiveData becomes a one-item list

    Unknown keys are kept and reported as warnings.

    Returns:
        ValidationResult; validated_config holds the normalized options
        when there are no errors
    """
    errors: List[str] = []
    warnings: List[str] = []

    def add_error(key: str, msg: str, suggestion: Optional[str] = None):
        full_msg = f"[{key}] {msg}"
        if suggestion:
            full_msg += f" | Suggestion: {suggestion}"
        errors.append(full_msg)

    def add_warning(key: str, msg: str):
        warnings.append(f"[{key}] {msg}")

    if not isinstance(options, Mapping):
        add_error('config', f"Options must be a mapping, got {type(options).__name__}")
        return ValidationResult(is_valid=False, errors=errors, warnings=warnings)

    validated = dict(options)

    for key in BOOLEAN_OPTIONS:
        if key in validated and not isinstance(validated[key], bool):
            add_error(key, f"Expected true or false, got {validated[key]!r}")

    for key in STRING_OPTIONS:
        value = validated.get(key)
        if value is None:
            if key == 'publishTag':
                add_warning(key, f"Missing publish tag, using '{DEFAULT_PUBLISH_TAG}'")
                validated[key] = DEFAULT_PUBLISH_TAG
            elif key == 'publishCommand':
                add_error(key, "Publish command is required", "Use 'npm publish'")
            else:
                validated[key] = ''
        elif not isinstance(value, str):
            add_error(key, f"Expected a string, got {type(value).__name__}")
        elif key == 'publishTag' and not value.strip():
            add_warning(key, f"Empty publish tag, using '{DEFAULT_PUBLISH_TAG}'")
            validated[key] = DEFAULT_PUBLISH_TAG
        elif key == 'publishCommand' and not value.strip():
            add_error(key, "Publish command is required", "Use 'npm publish'")

    validations = validated.get('validations', {})
    if validations is None:
        validations = {}
    if not isinstance(validations, Mapping):
        add_error('validations', f"Expected an object, got {type(validations).__name__}")
        validations = {}

    from ..validations import VALIDATION_KEYS

    normalized: Dict[str, Any] = {}
    for key, value in validations.items():
        path = f"validations.{key}"
        if key not in VALIDATION_KEYS:
            add_warning(path, "Unknown validation, it will be ignored")
        if value is None:
            add_warning(path, "Missing value, the validation is disabled")
            value = False
        elif isinstance(value, bool):
            pass
        elif key in STRING_VALIDATIONS and isinstance(value, str):
            if key == 'branch':
                _check_branch_pattern(value, add_error)
        elif key in MAPPING_VALIDATIONS and isinstance(value, Mapping):
            ignore = value.get('ignore', [])
            if isinstance(ignore, str):
                ignore = [ignore]
            if not isinstance(ignore, list) or not all(isinstance(item, str) for item in ignore):
                add_error(f"{path}.ignore", "Expected a list of glob patterns")
            else:
                value = {**value, 'ignore': ignore}
        elif key in VALIDATION_KEYS:
            add_error(path, f"Unsupported value {value!r}", "Use true, false or see the documentation")
        normalized[key] = value
    validated['validations'] = normalized

    for key in validated:
        if key not in BOOLEAN_OPTIONS + STRING_OPTIONS + ('validations',):
            add_warning(key, "Unknown option, it will be ignored")

    return ValidationResult(
        is_valid=len(errors) == 0,
        errors=errors,
        warnings=warnings,
        validated_config=validated if not errors else {}
    )


def freeze(value: Any) -> Any:
    """Read-only copy of an option tree (mappings become MappingProxyType, lists tuples)."""
    if isinstance(value, Mapping):
        return MappingProxyType({key: freeze(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze(item) for item in value)
    return value


def thaw(value: Any) -> Any:
    """Plain, JSON-serializable copy of a (possibly frozen) option tree."""
    if isinstance(value, Mapping):
        return {key: thaw(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [thaw(item) for item in value]
    return value


def get_options(
    overrides: Optional[Mapping[str, Any]] = None,
    project_dir: Optional[Path] = None
) -> Mapping[str, Any]:
    """
    Resolve the options for a run.

    Args:
        overrides: Options that win over the rc file and the defaults
        project_dir: Directory holding the rc file (defaults to cwd)

    Returns:
        Frozen, validated options

    Raises:
        ConfigError: If the rc file is malformed
        ConfigValidationError: If the merged options are invalid (CFG-02)
    """
    project_dir = Path(project_dir) if project_dir is not None else Path.cwd()

    options = deep_merge(default_options(), load_rc_file(project_dir))
    if overrides:
        options = deep_merge(options, overrides)

    result = validate_options(options).log_warnings()
    if not result:
        for err in result.errors:
            logger.error(err, extra={'error_code': 'CFG-02'})
    result.raise_if_invalid()

    return freeze(result.validated_config)


def save_options(options: Mapping[str, Any], project_dir: Path) -> Path:
    """
    Persist options to the project's .publishrc (atomic write).

    Returns:
        Path of the written file
    """
    path = Path(project_dir) / RC_FILE
    atomic_write(path, json.dumps(thaw(options), indent=2) + '\n')
    logger.info(f"Options saved to {path}")
    return path
