"""
Tests for the command line entry point.
"""

import json
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from publish_please import cli
from publish_please.core.npm_utils import NpmInfo


@pytest.fixture
def clean_env(monkeypatch):
    for name in ('CI', 'npm_command', 'npm_config_with_publish_please', 'npm_config_dry_run',
                 'npm_config_ci', 'npm_config_global'):
        monkeypatch.delenv(name, raising=False)


def run_main(argv):
    with pytest.raises(SystemExit) as exc_info:
        cli.main(argv)
    return exc_info.value.code


class TestParser:

    def test_default_command_is_publish(self):
        args = cli.build_parser().parse_args([])
        assert args.command == 'publish'
        assert not args.dry_run

    def test_flags(self):
        args = cli.build_parser().parse_args(['--dry-run', '--ci', '--project-dir', '/tmp/pkg'])
        assert args.dry_run
        assert args.ci
        assert args.project_dir == Path('/tmp/pkg')

    def test_unknown_command_rejected(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(['deploy'])


class TestGuardCommand:

    def test_guard_rejects(self, clean_env, monkeypatch, capsys):
        monkeypatch.setenv('npm_command', 'publish')

        assert run_main(['guard']) == 1
        assert "'npm publish' is forbidden for this package" in capsys.readouterr().out

    def test_guard_allows(self, clean_env, monkeypatch):
        monkeypatch.setenv('npm_command', 'publish')
        monkeypatch.setenv('npm_config_with_publish_please', 'true')

        assert run_main(['guard']) == 0


class TestInitCommand:

    def test_init_installs_hooks(self, clean_env, project_dir):
        with patch.object(cli, 'get_npm_info', return_value=NpmInfo('9.8.1')):
            assert run_main(['init', '--ci', '--project-dir', str(project_dir)]) == 0

        scripts = json.loads((project_dir / 'package.json').read_text())['scripts']
        assert scripts['prepublishOnly'] == 'publish-please guard'

    def test_init_without_package_json(self, clean_env, tmp_path):
        with patch.object(cli, 'get_npm_info', return_value=NpmInfo('9.8.1')):
            assert run_main(['init', '--ci', '--project-dir', str(tmp_path)]) == 1


class TestPublishCommand:

    def test_missing_package_json(self, clean_env, tmp_path, capsys):
        assert run_main(['--ci', '--project-dir', str(tmp_path)]) == 1
        assert "package.json file doesn't exist." in capsys.readouterr().out

    def test_malformed_rc_file(self, clean_env, project_dir, capsys):
        (project_dir / '.publishrc').write_text('nope')

        assert run_main(['--ci', '--project-dir', str(project_dir)]) == 1
        assert '.publishrc is not a valid JSON file.' in capsys.readouterr().out

    def test_validation_failure_writes_json_report(self, clean_env, project_dir, tmp_path):
        (project_dir / '.publishrc').write_text(json.dumps({
            'prePublishScript': '',
            'validations': {
                'vulnerableDependencies': False,
                'sensitiveData': False,
                'uncommittedChanges': False,
                'untrackedFiles': False,
                'gitTag': False,
                'branch': 'release',
            },
        }))
        report_path = tmp_path / 'reports' / 'validations.json'

        with patch('publish_please.core.git_utils.current_branch', return_value='master'):
            code = run_main(['--ci', '--project-dir', str(project_dir), '--json-report', str(report_path)])

        assert code == 1
        report = json.loads(report_path.read_text())
        assert report['ok'] is False
        assert report['errors'] == ["Expected branch to be 'release', but it was 'master'."]

    def test_log_file(self, clean_env, tmp_path):
        log_file = tmp_path / 'publish.log'

        assert run_main(['--ci', '--project-dir', str(tmp_path), '--log-file', str(log_file)]) == 1

        entries = [json.loads(line) for line in log_file.read_text().splitlines()]
        assert any(entry.get('error_code') == 'WF-01' for entry in entries)
