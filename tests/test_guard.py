"""
Tests for the guard gate (prepublishOnly hook).
"""

import io
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from publish_please.core.colors import Colors
from publish_please.core.invocation import InvocationContext, detect
from publish_please.core.reporting import CIReporter, ElegantReporter
from publish_please.guard import REJECTION_MESSAGE, GuardState, evaluate, main, run_guard


class TestEvaluate:

    def test_blocked_by_default(self):
        assert evaluate(InvocationContext.empty()) is GuardState.BLOCKED

    def test_blocked_for_bare_publish(self):
        assert evaluate(detect({'npm_command': 'publish'})) is GuardState.BLOCKED

    def test_allowed_with_trusted_flag(self):
        context = detect({'npm_command': 'publish', 'npm_config_with_publish_please': 'true'})
        assert evaluate(context) is GuardState.ALLOWED

    def test_other_flags_do_not_allow(self):
        context = detect({
            'npm_command': 'publish',
            'npm_config_dry_run': 'true',
            'npm_config_ci': 'true',
            'npm_config_global': 'true',
        })
        assert evaluate(context) is GuardState.BLOCKED


class TestRunGuard:

    def test_rejects_bare_publish(self):
        reporter = CIReporter(stream=io.StringIO())
        code = run_guard({'npm_command': 'publish'}, reporter=reporter)

        assert code == 1
        assert "'npm publish' is forbidden for this package" in reporter.stream.getvalue()

    def test_allows_trusted_release_silently(self):
        reporter = CIReporter(stream=io.StringIO())
        code = run_guard(
            {'npm_command': 'publish', 'npm_config_with_publish_please': 'true'},
            reporter=reporter
        )

        assert code == 0
        assert reporter.stream.getvalue() == ''

    def test_ci_output_has_no_ansi(self, capsys):
        code = run_guard({'npm_command': 'publish', 'npm_config_ci': 'true'})
        out = capsys.readouterr().out

        assert code == 1
        assert REJECTION_MESSAGE in out
        assert '\x1b[' not in out

    def test_ci_env_var_selects_plain_output(self, capsys):
        code = run_guard({'npm_command': 'publish', 'CI': 'true'})
        out = capsys.readouterr().out

        assert code == 1
        assert '\x1b[' not in out

    def test_elegant_output_is_red(self):
        reporter = ElegantReporter(stream=io.StringIO(), use_colors=True)
        code = run_guard({'npm_command': 'publish'}, reporter=reporter)

        assert code == 1
        assert Colors.RED + REJECTION_MESSAGE in reporter.stream.getvalue()

    def test_malformed_env_is_rejected(self):
        reporter = CIReporter(stream=io.StringIO())
        assert run_guard({'npm_command': None, 'npm_config_with_publish_please': 1}, reporter=reporter) == 1


class TestMain:

    def test_exit_code_blocked(self, monkeypatch):
        monkeypatch.setenv('npm_command', 'publish')
        monkeypatch.setenv('CI', 'true')
        monkeypatch.delenv('npm_config_with_publish_please', raising=False)

        with pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == 1

    def test_exit_code_allowed(self, monkeypatch):
        monkeypatch.setenv('npm_command', 'publish')
        monkeypatch.setenv('npm_config_with_publish_please', 'true')

        with pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == 0
