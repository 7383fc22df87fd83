"""
Vulnerable dependencies validation, backed by `npm audit --json`.

Findings are reported per dependency path ("nodes" in the audit report),
without the leading node_modules/ and rendered by the active reporter:

    Vulnerability found in ms
    Vulnerability found in ggit -> node_modules -> lodash

Advisories listed in .auditignore are dropped before the report is read;
extra `npm audit` arguments come from audit.opts (see core.npm_utils).
"""

import re
from typing import Any, Callable, Dict, List, Optional

from ..core import npm_utils
from ..core.base import Validation, ValidationContext, ValidationFailure
from ..core.npm_utils import AUDIT_JSON_MIN_VERSION, NpmInfo


LEADING_NODE_MODULES = re.compile(r'^node_modules/')


def vulnerable_paths(report: Dict[str, Any]) -> List[str]:
    """Distinct dependency paths affected by the report's vulnerabilities, sorted."""
    paths = set()
    vulnerabilities = report.get('vulnerabilities') or {}
    for vulnerability in vulnerabilities.values():
        for node in vulnerability.get('nodes', []):
            paths.add(LEADING_NODE_MODULES.sub('', node))
    return sorted(paths)


def audit_error_summary(report: Dict[str, Any]) -> Optional[str]:
    """
    Summary of an audit tool error; continuation lines are tab-indented.
    """
    error = report.get('error')
    if not isinstance(error, dict) or not error.get('summary'):
        return None
    lines = str(error['summary']).split('\n')
    return '\n'.join([lines[0]] + [f"\t{line}" for line in lines[1:]])


class VulnerableDependenciesValidation(Validation):
    """
    Args:
        npm_info: npm capabilities (detected on first use when omitted)
        audit_fn: Audit runner taking the project directory and returning
            the parsed report (defaults to npm_utils.audit)
    """

    key = 'vulnerableDependencies'
    status_text = 'Checking for the vulnerable dependencies'
    default_enabled = True

    def __init__(
        self,
        npm_info: Optional[NpmInfo] = None,
        audit_fn: Optional[Callable[[Any], Dict[str, Any]]] = None
    ):
        self._npm_info = npm_info
        self._audit_fn = audit_fn

    @property
    def npm_info(self) -> NpmInfo:
        if self._npm_info is None:
            self._npm_info = npm_utils.get_npm_info()
        return self._npm_info

    def can_run(self) -> bool:
        return self.npm_info.audit_has_json_reporter

    def why_cannot_run(self) -> str:
        return (
            f"Cannot check vulnerable dependencies because npm version is "
            f"{self.npm_info.version}. Either upgrade npm to version {AUDIT_JSON_MIN_VERSION} "
            f"or above, or disable this validation in the configuration file"
        )

    def configure(self, current_value: Any, prompter) -> Any:
        return prompter.confirm(
            "Would you like to verify that your package doesn't have vulnerable dependencies before publishing?",
            default=current_value is not False
        )

    def run(self, options: Any, context: ValidationContext) -> List[str]:
        audit_fn = self._audit_fn or npm_utils.audit
        report = audit_fn(context.project_dir)

        lines = {
            f"Vulnerability found in {context.format_path(path, '/')}"
            for path in vulnerable_paths(report)
        }
        if lines:
            # Sorted as rendered, separators included
            return sorted(lines)

        summary = audit_error_summary(report)
        if summary:
            raise ValidationFailure(summary)
        return []
