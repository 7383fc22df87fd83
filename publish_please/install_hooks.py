"""
Hook installation (`publish-please init`).

Adds two scripts to the project's package.json:

    "publish-please": "publish-please"               -> npm run publish-please
    "prepublishOnly": "publish-please guard"         -> blocks a bare npm publish

npm < 5 has no prepublishOnly; the guard goes into "prepublish" there.
An existing hook script is kept and chained after the guard. A project
without an rc file also gets a default .publishrc, with the npm-backed
validations turned off when the installed npm cannot run them.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from .core.atomic_write import atomic_write
from .core.config import default_options, find_rc_file, save_options
from .core.invocation import InvocationContext
from .core.npm_utils import PACKAGE_JSON, NpmInfo, read_package_json
from .core.reporting import Reporter


logger = logging.getLogger(__name__)

RUN_SCRIPT_NAME = 'publish-please'
RUN_SCRIPT = 'publish-please'
GUARD_SCRIPT = 'publish-please guard'


def add_hooks(package: Dict[str, Any], hook_name: str) -> bool:
    """
    Add the publish-please scripts to a parsed package.json, in place.

    Returns:
        True if package was modified
    """
    scripts = package.setdefault('scripts', {})
    changed = False

    if scripts.get(RUN_SCRIPT_NAME) != RUN_SCRIPT:
        scripts[RUN_SCRIPT_NAME] = RUN_SCRIPT
        changed = True

    existing = scripts.get(hook_name, '')
    if GUARD_SCRIPT not in existing:
        scripts[hook_name] = f"{GUARD_SCRIPT} && {existing}" if existing else GUARD_SCRIPT
        changed = True

    return changed


def default_rc_options(npm_info: NpmInfo) -> Dict[str, Any]:
    """Default options with the npm-backed validations set from npm capabilities."""
    options = default_options()
    options['validations']['vulnerableDependencies'] = npm_info.audit_has_json_reporter
    options['validations']['sensitiveData'] = npm_info.pack_has_json_reporter
    return options


def install_hooks(
    project_dir: Path,
    npm_info: NpmInfo,
    context: Optional[InvocationContext] = None,
    reporter: Optional[Reporter] = None
) -> int:
    """
    Install the hooks into package.json.

    Args:
        project_dir: Directory holding package.json
        npm_info: npm capabilities (selects prepublishOnly or prepublish)
        context: npm invocation context (global installs are refused)
        reporter: Console output

    Returns:
        Process exit code: 0 on success, 1 on failure
    """
    reporter = reporter or Reporter()
    context = context or InvocationContext.empty()

    if context.has_flag('global'):
        reporter.report_error(
            'publish-please should be installed as a dev dependency of a package, not globally.'
        )
        return 1

    path = Path(project_dir) / PACKAGE_JSON
    if not path.is_file():
        logger.error(f"No {PACKAGE_JSON} in {project_dir}", extra={'error_code': 'WF-01'})
        reporter.report_error(f"Unable to find {PACKAGE_JSON} in {project_dir}")
        return 1

    if find_rc_file(project_dir) is None:
        rc_path = save_options(default_rc_options(npm_info), project_dir)
        reporter.report_information(f"Default configuration written to {rc_path.name}")

    package = read_package_json(project_dir)
    hook_name = npm_info.prepublish_hook

    if not add_hooks(package, hook_name):
        reporter.report_information(f"publish-please hooks are already installed in {PACKAGE_JSON}")
        return 0

    atomic_write(path, json.dumps(package, indent=2) + '\n')
    logger.info(f"Hooks written to {path} ({hook_name})")
    reporter.report_success(
        f"publish-please hooks were successfully configured in {PACKAGE_JSON}. "
        f"Run 'npx publish-please config' to set the options."
    )
    return 0
