"""
Guard gate for `npm publish`.

Installed as the package's prepublishOnly hook (`publish-please guard`).
npm runs the hook before every publish; the guard lets the publish through
only when it carries --with-publish-please, which the release workflow
appends to its own publish command. A bare `npm publish` is rejected.
"""

import logging
import os
import sys
from enum import Enum
from typing import Mapping, Optional

from .core.invocation import InvocationContext, detect
from .core.reporting import Reporter, select_reporter


logger = logging.getLogger(__name__)

REJECTION_MESSAGE = (
    "'npm publish' is forbidden for this package. "
    "Please use 'npm run publish-please' instead."
)


class GuardState(Enum):
    BLOCKED = 'blocked'
    ALLOWED = 'allowed'


def evaluate(context: InvocationContext) -> GuardState:
    """ALLOWED only for the trusted release flag; BLOCKED otherwise."""
    if context.is_trusted_release:
        return GuardState.ALLOWED
    return GuardState.BLOCKED


def run_guard(env: Optional[Mapping[str, str]] = None, reporter: Optional[Reporter] = None) -> int:
    """
    Evaluate the guard for an environment snapshot.

    Args:
        env: Environment snapshot (defaults to a copy of os.environ)
        reporter: Output for the rejection message (selected from env when omitted)

    Returns:
        Process exit code: 0 when allowed, 1 when rejected
    """
    if env is None:
        env = dict(os.environ)

    context = detect(env)
    state = evaluate(context)

    if state is GuardState.ALLOWED:
        logger.debug("Publish allowed: trusted release flag present")
        return 0

    if reporter is None:
        reporter = select_reporter(context, env)
    logger.debug(f"Publish rejected for npm {context.subcommand.value}", extra={'error_code': 'WF-03'})
    reporter.report_error(REJECTION_MESSAGE)
    return 1


def main() -> None:
    sys.exit(run_guard())
