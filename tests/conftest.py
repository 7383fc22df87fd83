"""
Shared fixtures and fakes for the publish-please test suite.
"""

import io
import json
import sys
from pathlib import Path
from typing import Any, List, Optional

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from publish_please.core.base import Validation
from publish_please.core.reporting import CIReporter


class FakeValidation(Validation):
    """Validation with scripted behavior that records every call."""

    def __init__(
        self,
        key: str,
        errors: Optional[List[str]] = None,
        raises: Optional[Exception] = None,
        runnable: bool = True,
        reason: str = '',
        default_enabled: Any = True,
        calls: Optional[list] = None,
    ):
        self.key = key
        self.status_text = f"Checking {key}"
        self.default_enabled = default_enabled
        self.errors = errors or []
        self.raises = raises
        self.runnable = runnable
        self.reason = reason
        self.can_run_calls = 0
        self.run_calls: List[Any] = []
        self.shared_calls = calls

    def can_run(self) -> bool:
        self.can_run_calls += 1
        return self.runnable

    def why_cannot_run(self) -> str:
        return self.reason

    def configure(self, current_value, prompter):
        return prompter.confirm(f"Enable {self.key}?", default=current_value is not False)

    def run(self, options, context):
        self.run_calls.append(options)
        if self.shared_calls is not None:
            self.shared_calls.append(self.key)
        if self.raises is not None:
            raise self.raises
        return list(self.errors)


class ScriptedPrompter:
    """Prompter answering from queues; records the questions asked."""

    def __init__(self, confirms=None, inputs=None):
        self.confirms = list(confirms or [])
        self.inputs = list(inputs or [])
        self.questions: List[str] = []

    def confirm(self, question, default=False):
        self.questions.append(question)
        return self.confirms.pop(0) if self.confirms else default

    def input(self, question, default=''):
        self.questions.append(question)
        return self.inputs.pop(0) if self.inputs else default


class ScriptRecorder:
    """Stands in for core.shell.run_script."""

    def __init__(self, fail_on: Optional[str] = None):
        self.commands: List[str] = []
        self.fail_on = fail_on

    def __call__(self, command: str, cwd: Path) -> None:
        from publish_please.core.shell import ScriptError

        self.commands.append(command)
        if self.fail_on is not None and command == self.fail_on:
            raise ScriptError(command, 1)


@pytest.fixture
def project_dir(tmp_path):
    """Project directory with a minimal package.json."""
    (tmp_path / 'package.json').write_text(json.dumps({
        'name': 'testing-repo',
        'version': '1.3.77',
        'scripts': {},
    }))
    return tmp_path


@pytest.fixture
def ci_reporter():
    """Plain reporter writing into a buffer (read it with .stream.getvalue())."""
    return CIReporter(stream=io.StringIO())
