"""
Tests for the npm collaborator: versions, package.json, pack and audit.

The npm binary is never run; _run_npm_command is patched.
"""

import json
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from publish_please.core import npm_utils
from publish_please.core.npm_utils import (
    NpmError,
    NpmInfo,
    NpmNotInstalledError,
    artifact_name,
    filter_ignored_advisories,
    parse_version,
    read_audit_options,
    read_package_json,
    version_gte,
)


class TestVersions:

    @pytest.mark.parametrize("version,expected", [
        ('6.1.0', (6, 1, 0)),
        ('v8.19.2', (8, 19, 2)),
        ('7.0.0-beta.1', (7, 0, 0)),
        ('10', (10, 0, 0)),
        ('5.x', (5, 0, 0)),
    ])
    def test_parse_version(self, version, expected):
        assert parse_version(version) == expected

    def test_version_gte(self):
        assert version_gte('6.1.0', '6.1.0')
        assert version_gte('10.0.0', '6.1.0')
        assert not version_gte('6.0.9', '6.1.0')
        assert not version_gte(None, '6.1.0')

    def test_capabilities(self):
        old = NpmInfo('4.6.1')
        assert not old.pack_has_json_reporter
        assert not old.audit_has_json_reporter
        assert old.prepublish_hook == 'prepublish'

        modern = NpmInfo('9.8.1')
        assert modern.pack_has_json_reporter
        assert modern.audit_has_json_reporter
        assert modern.prepublish_hook == 'prepublishOnly'

    def test_get_npm_info_without_npm(self):
        npm_utils.get_npm_info.cache_clear()
        try:
            with patch('publish_please.core.npm_utils.shutil.which', return_value=None):
                assert npm_utils.get_npm_info() == NpmInfo(None)
        finally:
            npm_utils.get_npm_info.cache_clear()

    def test_get_npm_info_parses_version(self):
        npm_utils.get_npm_info.cache_clear()
        try:
            with patch.object(npm_utils, '_run_npm_command', return_value=(0, '6.4.1\n', '')):
                assert npm_utils.get_npm_info().version == '6.4.1'
        finally:
            npm_utils.get_npm_info.cache_clear()


class TestPackageJson:

    def test_read(self, project_dir):
        assert read_package_json(project_dir)['name'] == 'testing-repo'

    def test_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_package_json(tmp_path)

    def test_malformed(self, tmp_path):
        (tmp_path / 'package.json').write_text('{"name": ')
        with pytest.raises(NpmError, match='not a valid JSON file'):
            read_package_json(tmp_path)

    def test_artifact_name(self):
        assert artifact_name({'name': 'testing-repo', 'version': '1.3.77'}) == 'testing-repo-1.3.77.tgz'
        assert artifact_name({'name': '@scope/lib', 'version': '1.0.0'}) == 'scope-lib-1.0.0.tgz'


class TestPackedFiles:

    def test_parses_pack_output(self, tmp_path):
        output = json.dumps([{'files': [{'path': 'package.json'}, {'path': 'lib/index.js'}]}])
        with patch.object(npm_utils, '_run_npm_command', return_value=(0, output, '')) as mock_run:
            assert npm_utils.packed_files(tmp_path) == ['package.json', 'lib/index.js']

        assert mock_run.call_args[0][0] == ['pack', '--dry-run', '--json']

    def test_pack_failure(self, tmp_path):
        with patch.object(npm_utils, '_run_npm_command', return_value=(1, '', 'ERR!')):
            with pytest.raises(NpmError, match='exited with code 1'):
                npm_utils.packed_files(tmp_path)

    def test_unparseable_output(self, tmp_path):
        with patch.object(npm_utils, '_run_npm_command', return_value=(0, 'not json', '')):
            with pytest.raises(NpmError, match='Cannot parse'):
                npm_utils.packed_files(tmp_path)


class TestAuditIgnore:

    REPORT = {
        'vulnerabilities': {
            'ms': {
                'via': [{'url': 'https://github.com/advisories/GHSA-ms'}],
                'nodes': ['node_modules/ms'],
            },
            'debug': {
                'via': ['ms'],
                'nodes': ['node_modules/debug'],
            },
            'lodash': {
                'via': [
                    {'url': 'https://github.com/advisories/GHSA-lodash-1'},
                    {'url': 'https://github.com/advisories/GHSA-lodash-2'},
                ],
                'nodes': ['node_modules/lodash'],
            },
        }
    }

    def test_no_ignores_returns_report(self):
        assert filter_ignored_advisories(self.REPORT, []) is self.REPORT

    def test_drops_ignored_advisory_and_dependents(self):
        filtered = filter_ignored_advisories(self.REPORT, ['https://github.com/advisories/GHSA-ms'])
        assert sorted(filtered['vulnerabilities']) == ['lodash']

    def test_keeps_partially_ignored(self):
        filtered = filter_ignored_advisories(self.REPORT, ['https://github.com/advisories/GHSA-lodash-1'])
        lodash = filtered['vulnerabilities']['lodash']

        assert lodash['via'] == [{'url': 'https://github.com/advisories/GHSA-lodash-2'}]
        assert 'ms' in filtered['vulnerabilities']

    def test_input_not_modified(self):
        filter_ignored_advisories(self.REPORT, ['https://github.com/advisories/GHSA-ms'])
        assert len(self.REPORT['vulnerabilities']['ms']['via']) == 1

    def test_audit_options_file(self, tmp_path):
        (tmp_path / 'audit.opts').write_text("# levels\n--audit-level=high\n--omit dev\n")
        assert read_audit_options(tmp_path) == ['--audit-level=high', '--omit', 'dev']


class TestAudit:

    def test_audit_with_lockfile(self, tmp_path):
        (tmp_path / 'package-lock.json').write_text('{}')
        (tmp_path / 'audit.opts').write_text('--audit-level=high\n')
        (tmp_path / '.auditignore').write_text('https://github.com/advisories/GHSA-ms\n')
        output = json.dumps(TestAuditIgnore.REPORT)

        with patch.object(npm_utils, '_run_npm_command', return_value=(1, output, '')) as mock_run:
            report = npm_utils.audit(tmp_path)

        assert mock_run.call_count == 1
        assert mock_run.call_args[0][0] == ['audit', '--json', '--audit-level=high']
        assert sorted(report['vulnerabilities']) == ['lodash']

    def test_temporary_lockfile_is_removed(self, tmp_path):
        def fake_npm(args, cwd, **kwargs):
            if args[0] == 'install':
                (tmp_path / 'package-lock.json').write_text('{}')
                return 0, '', ''
            return 0, json.dumps({'vulnerabilities': {}}), ''

        with patch.object(npm_utils, '_run_npm_command', side_effect=fake_npm):
            assert npm_utils.audit(tmp_path) == {'vulnerabilities': {}}

        assert not (tmp_path / 'package-lock.json').exists()

    def test_empty_output(self, tmp_path):
        (tmp_path / 'package-lock.json').write_text('{}')
        with patch.object(npm_utils, '_run_npm_command', return_value=(1, '', 'boom')):
            with pytest.raises(NpmError, match='boom'):
                npm_utils.audit(tmp_path)


class TestRunNpmCommand:

    def test_missing_npm(self, tmp_path):
        with patch('publish_please.core.npm_utils.shutil.which', return_value=None):
            with pytest.raises(NpmNotInstalledError, match='not installed'):
                npm_utils._run_npm_command(['--version'], tmp_path)

    def test_timeout(self, tmp_path):
        import subprocess

        with patch('publish_please.core.npm_utils.shutil.which', return_value='/usr/bin/npm'):
            with patch('subprocess.run', side_effect=subprocess.TimeoutExpired('npm', 5)):
                with pytest.raises(npm_utils.NpmTimeoutError, match='timed out'):
                    npm_utils._run_npm_command(['audit'], tmp_path, timeout=5)
