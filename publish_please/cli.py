"""
Command line entry point.

    publish-please                 run the guarded release workflow
    publish-please --dry-run       everything but the real publish
    publish-please guard           prepublishOnly hook: reject a bare `npm publish`
    publish-please config          interactive .publishrc editor
    publish-please init            add the hooks to package.json

Flags npm passes through the environment (npm run publish-please --dry-run)
are honored as well as the command line ones.
"""

import json
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .configure import run_configurator
from .core.base import PublishPleaseError
from .core.invocation import detect
from .core.logger import setup_logger
from .core.npm_utils import get_npm_info
from .core.reporting import generate_json_report, select_reporter
from .guard import run_guard
from .install_hooks import install_hooks
from .workflow import ReleaseWorkflow, ValidationsFailedError


logger = logging.getLogger(__name__)

COMMANDS = ('publish', 'guard', 'config', 'init')


def build_parser():
    import argparse

    parser = argparse.ArgumentParser(
        prog='publish-please',
        description="Safe and highly functional replacement for 'npm publish'",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                     # Validate and publish
  %(prog)s --dry-run           # Validate and show what would be published
  %(prog)s --ci                # Plain output for CI logs
  %(prog)s guard               # Use as the prepublishOnly hook
  %(prog)s config              # Configure options interactively
  %(prog)s init                # Install the hooks into package.json
        """
    )

    parser.add_argument(
        'command',
        nargs='?',
        default='publish',
        choices=COMMANDS,
        help='Command to run (default: publish)'
    )

    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Run every step except the real publish'
    )

    parser.add_argument(
        '--ci',
        action='store_true',
        help='Plain-text output for CI logs'
    )

    parser.add_argument(
        '--project-dir',
        type=Path,
        default=None,
        help='Directory holding package.json (default: current directory)'
    )

    parser.add_argument(
        '--json-report',
        type=Path,
        default=None,
        help='Write the validation results as JSON to this path'
    )

    parser.add_argument(
        '--log-file',
        type=Path,
        default=None,
        help='Write a JSON-lines debug log to this path'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Show debug logging on stderr'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f"%(prog)s {__version__}"
    )

    return parser


def _configure_logging(verbose: bool, log_file: Optional[Path]) -> None:
    if not verbose and log_file is None:
        logging.getLogger('publish_please').addHandler(logging.NullHandler())
        return
    setup_logger(
        log_file=log_file,
        level=logging.DEBUG,
        console=verbose,
    )


def _write_json_report(path: Path, report: dict) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(report, f, indent=2)


def main(argv: Optional[List[str]] = None) -> None:
    """Main CLI entry point"""
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose, args.log_file)

    env = dict(os.environ)

    if args.command == 'guard':
        sys.exit(run_guard(env))

    context = detect(env)
    reporter = select_reporter(context, env, force_ci=args.ci)
    project_dir = args.project_dir or Path.cwd()

    try:
        if args.command == 'init':
            sys.exit(install_hooks(project_dir, get_npm_info(), context=context, reporter=reporter))

        if args.command == 'config':
            path = run_configurator(project_dir)
            reporter.report_success(f"Configuration saved to {path}")
            sys.exit(0)

        workflow = ReleaseWorkflow(
            project_dir=project_dir,
            reporter=reporter,
            context=context,
            dry_run=True if args.dry_run else None,
        )
        workflow.run()
        if args.json_report and workflow.result is not None:
            _write_json_report(args.json_report, generate_json_report(workflow.result))

    except ValidationsFailedError as e:
        if args.json_report:
            _write_json_report(args.json_report, generate_json_report(e.result))
        sys.exit(1)

    except PublishPleaseError as e:
        logger.debug("Workflow aborted", exc_info=True)
        reporter.report_error(str(e))
        sys.exit(1)

    except KeyboardInterrupt:
        reporter.report_error('Interrupted')
        sys.exit(130)

    sys.exit(0)


if __name__ == "__main__":
    main()
