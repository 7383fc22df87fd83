"""
Console reporters for the publishing workflow.

Two reporters share one interface:
- ElegantReporter: colors and symbols, for interactive terminals
- CIReporter: plain text, no ANSI codes, for CI logs

select_reporter() picks one from the invocation context (`--ci` flag) and
the CI environment variable.

Also provides generate_json_report() for machine-readable pipeline results.
"""

import sys
from typing import Any, Dict, List, Mapping, Optional, TextIO

from .base import OutcomeStatus, PipelineResult, ValidationOutcome
from .colors import Colors, box_lines, colorize
from .invocation import InvocationContext


ERRORS_TITLE = 'ERRORS'
BULLET = '  * '


class Reporter:
    """
    Base reporter: plain output to a stream.

    Args:
        stream: Output stream (defaults to sys.stdout at call time)
        use_colors: Force colors on or off; None means "only on a TTY"
    """

    name = 'plain'

    def __init__(self, stream: Optional[TextIO] = None, use_colors: Optional[bool] = False):
        self._stream = stream
        self.use_colors = use_colors

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    def _print(self, line: str = '') -> None:
        print(line, file=self.stream, flush=True)

    def _color(self, text: str, color: str) -> str:
        return colorize(text, color, self.use_colors)

    def format_as_elegant_path(self, path: str, separator: str = '/') -> str:
        """
        Render a dependency path ("a/node_modules/b") as "a -> node_modules -> b".
        """
        parts = [part for part in path.split(separator) if part]
        if not parts:
            return path
        parts[-1] = self._color(parts[-1], Colors.BOLD_RED)
        return ' -> '.join(parts)

    def report_running_task(self, text: str) -> None:
        self._print(f"{text}...")

    def report_step(self, outcome: ValidationOutcome) -> None:
        if outcome.status == OutcomeStatus.PASSED:
            self._print(f"  [OK] {outcome.status_text}")
        elif outcome.status == OutcomeStatus.SKIPPED:
            self._print(f"  [SKIPPED] {outcome.status_text}")
        elif outcome.status == OutcomeStatus.UNSUPPORTED:
            self._print(f"  [UNSUPPORTED] {outcome.status_text}")
        else:
            self._print(f"  [FAILED] {outcome.status_text}")

    def error_section_lines(self, result: PipelineResult) -> List[str]:
        """Lines of the trailing ERRORS block, one section per failing validation."""
        lines: List[str] = []
        for outcome in result.failed_outcomes:
            lines.append(f" {outcome.status_text}:")
            lines.extend(f"{BULLET}{message}" for message in outcome.messages)
        return lines

    def report_error_section(self, result: PipelineResult) -> None:
        if result.ok:
            return
        self._print()
        self._print(self._color(ERRORS_TITLE, Colors.BOLD_RED))
        for line in self.error_section_lines(result):
            self._print(line)
        self._print()

    def report_release_info(self, info: Mapping[str, str]) -> None:
        self._print()
        self._print('Release info')
        for key, value in info.items():
            self._print(f"  {key}: {value}")
        self._print()

    def report_information(self, message: str) -> None:
        self._print(message)

    def report_success(self, message: str) -> None:
        self._print(message)

    def report_warning(self, message: str) -> None:
        self._print(message)

    def report_error(self, message: str) -> None:
        self._print(message)


class CIReporter(Reporter):
    """Plain-text reporter for CI logs; never emits ANSI codes."""

    name = 'ci'

    def __init__(self, stream: Optional[TextIO] = None):
        super().__init__(stream=stream, use_colors=False)

    def report_running_task(self, text: str) -> None:
        self._print(f"[publish-please] {text}")

    def report_success(self, message: str) -> None:
        self._print(f"[publish-please] {message}")

    def report_warning(self, message: str) -> None:
        self._print(f"[publish-please] WARNING: {message}")

    def report_error(self, message: str) -> None:
        self._print(f"[publish-please] ERROR: {message}")


class ElegantReporter(Reporter):
    """Colorized reporter with status symbols, for interactive terminals."""

    name = 'elegant'

    def __init__(self, stream: Optional[TextIO] = None, use_colors: Optional[bool] = None):
        super().__init__(stream=stream, use_colors=use_colors)

    def report_running_task(self, text: str) -> None:
        self._print(self._color(f"{text}...", Colors.BOLD))

    def report_step(self, outcome: ValidationOutcome) -> None:
        if outcome.status == OutcomeStatus.PASSED:
            mark = self._color('✓', Colors.GREEN)
            self._print(f"  {mark} {outcome.status_text}")
        elif outcome.status == OutcomeStatus.SKIPPED:
            self._print(self._color(f"  - {outcome.status_text} (skipped)", Colors.DIM))
        elif outcome.status == OutcomeStatus.UNSUPPORTED:
            mark = self._color('!', Colors.YELLOW)
            self._print(f"  {mark} {outcome.status_text} (cannot run)")
        else:
            mark = self._color('✖', Colors.RED)
            self._print(f"  {mark} {outcome.status_text}")

    def report_error_section(self, result: PipelineResult) -> None:
        if result.ok:
            return
        self._print()
        self._print(self._color(f" {ERRORS_TITLE} ", Colors.BG_RED))
        for line in self.error_section_lines(result):
            self._print(self._color(line, Colors.RED) if line.startswith(BULLET) else line)
        self._print()

    def report_release_info(self, info: Mapping[str, str]) -> None:
        lines = [f"{self._color(key + ':', Colors.BOLD)} {value}" for key, value in info.items()]
        self._print()
        for row in box_lines(lines, title='Release info', width=70, enabled=self.use_colors):
            self._print(row)
        self._print()

    def report_information(self, message: str) -> None:
        self._print(self._color(message, Colors.BLUE))

    def report_success(self, message: str) -> None:
        self._print(self._color(message, Colors.GREEN))

    def report_warning(self, message: str) -> None:
        self._print(self._color(message, Colors.YELLOW))

    def report_error(self, message: str) -> None:
        self._print(self._color(message, Colors.RED))


def is_ci_environment(env: Optional[Mapping[str, str]]) -> bool:
    """True when the CI environment variable is set to a truthy value."""
    if not env:
        return False
    return str(env.get('CI', '')).lower() in ('true', '1', 'yes')


def select_reporter(
    context: InvocationContext,
    env: Optional[Mapping[str, str]] = None,
    stream: Optional[TextIO] = None,
    force_ci: bool = False
) -> Reporter:
    """
    Pick the reporter for this run.

    Args:
        context: Detected npm invocation context
        env: Environment snapshot (for the CI variable)
        stream: Output stream
        force_ci: Set by the --ci command line option

    Returns:
        CIReporter on CI, ElegantReporter otherwise
    """
    if force_ci or context.is_ci or is_ci_environment(env):
        return CIReporter(stream=stream)
    return ElegantReporter(stream=stream)


def generate_json_report(result: PipelineResult) -> Dict[str, Any]:
    """
    Generate JSON format report of a pipeline run.

    Structure:
    {
        "ok": bool,
        "validations": [
            {"key": str, "status": str, "errors": [str], "reason": str}
        ],
        "errors": [str]
    }
    """
    return {
        "ok": result.ok,
        "validations": [
            {
                "key": outcome.key,
                "status": outcome.status.value,
                "errors": list(outcome.errors),
                "reason": outcome.reason,
            }
            for outcome in result.outcomes
        ],
        "errors": result.errors,
    }
