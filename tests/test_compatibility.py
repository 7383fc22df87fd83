"""
Python version and platform compatibility tests.

Verifies publish-please imports and runs on the supported interpreters
(Python 3.8+) and that the stdlib pieces it leans on behave as expected.
"""

import os
import platform
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))


def test_python_version():
    """Test that Python version meets minimum requirement (3.8+)."""
    assert sys.version_info >= (3, 8), f"Python 3.8+ required, got {sys.version_info}"


def test_stdlib_modules():
    """Test that all required stdlib modules are available."""
    required_modules = [
        'argparse',
        'json',
        'logging',
        'pathlib',
        'subprocess',
        'shlex',
        'shutil',
        'tempfile',
        'fnmatch',
        'functools',
        'types',
        'enum',
        'abc',
        'dataclasses',
    ]

    for module_name in required_modules:
        try:
            __import__(module_name)
        except ImportError as e:
            raise AssertionError(f"Required stdlib module '{module_name}' not available: {e}")


def test_yaml_available():
    """PyYAML backs the .publishrc.yml configuration files."""
    import yaml

    assert yaml.safe_load("confirm: false\n") == {'confirm': False}


def test_all_modules_importable():
    """Test that all publish_please modules can be imported without errors.

    This catches Python 3.8 compatibility issues like using tuple[x, y]
    instead of Tuple[x, y] which would fail at import time.
    """
    modules_to_test = [
        'publish_please',
        'publish_please.core',
        'publish_please.core.atomic_write',
        'publish_please.core.base',
        'publish_please.core.colors',
        'publish_please.core.config',
        'publish_please.core.git_utils',
        'publish_please.core.invocation',
        'publish_please.core.logger',
        'publish_please.core.npm_utils',
        'publish_please.core.pipeline',
        'publish_please.core.prompts',
        'publish_please.core.reporting',
        'publish_please.core.shell',
        'publish_please.validations',
        'publish_please.validations.branch',
        'publish_please.validations.git_tag',
        'publish_please.validations.sensitive_data',
        'publish_please.validations.uncommitted_changes',
        'publish_please.validations.untracked_files',
        'publish_please.validations.vulnerable_dependencies',
        'publish_please.cli',
        'publish_please.configure',
        'publish_please.guard',
        'publish_please.install_hooks',
        'publish_please.workflow',
    ]

    import_errors = []
    for module_name in modules_to_test:
        try:
            __import__(module_name)
        except Exception as e:
            import_errors.append((module_name, str(e)))

    if import_errors:
        msg = "Failed to import modules:\n"
        for module, error in import_errors:
            msg += f"  {module}: {error}\n"
        raise AssertionError(msg)


def test_no_python39_builtin_generics():
    """
    Verify code uses typing.List/Dict/Tuple, not list[]/dict[]/tuple[] (Python 3.9+).

    On Python 3.8, builtin types like list, dict, tuple are not subscriptable.
    """
    import re

    package_dir = Path(__file__).parent.parent / 'publish_please'
    builtin_generic_pattern = re.compile(
        r':\s*(?:list|dict|tuple|set|frozenset)\s*\[|'
        r'->\s*(?:list|dict|tuple|set|frozenset)\s*\['
    )

    violations = []
    for py_file in package_dir.rglob('*.py'):
        for i, line in enumerate(py_file.read_text(encoding='utf-8').split('\n'), 1):
            stripped = line.strip()
            if stripped.startswith('#') or '"""' in line or "'''" in line:
                continue
            if builtin_generic_pattern.search(line):
                violations.append((py_file.name, i, stripped))

    assert not violations, f"Python 3.9+ builtin generics found: {violations[:5]}"


def test_platform_detection():
    """Test that we can detect the current platform."""
    system = platform.system()
    assert system in ["Linux", "Darwin", "Windows"], f"Unknown platform: {system}"
    assert platform.python_version()


def test_utf8_roundtrip(tmp_path):
    """package.json files may carry non-ASCII descriptions."""
    target = tmp_path / 'package.json'
    target.write_text('{"description": "Ñoño 世界"}', encoding='utf-8')

    assert 'Ñoño' in target.read_text(encoding='utf-8')


def test_subprocess_shell():
    """User scripts run through the platform shell."""
    import subprocess

    result = subprocess.run('echo ok', shell=True, capture_output=True, text=True)
    assert result.returncode == 0
    assert result.stdout.strip() == 'ok'


def test_environment_mapping():
    """os.environ converts cleanly into the plain mapping the detector reads."""
    env = dict(os.environ)
    assert isinstance(env, dict)
