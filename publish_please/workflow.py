"""
Release workflow.

Runs a guarded release end to end:

1. resolve options (defaults < .publishrc < overrides)
2. require package.json
3. pre-publish script ("npm test" by default)
4. validation pipeline; any blocking outcome aborts with the ERRORS report
5. confirmation, skipped in dry run (declining returns "" without error)
6. dry run: show the release info and stop
7. publish command, with --tag and the trusted release flag appended
8. post-publish script

Every step can abort the ones after it. Usage:

    from publish_please.workflow import publish

    command = publish({'publishTag': 'next'}, project_dir=Path('.'))
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Sequence

from .core.base import PipelineResult, PublishPleaseError, Validation, ValidationContext
from .core.config import DEFAULT_PUBLISH_TAG, get_options
from .core.invocation import TRUSTED_RELEASE_FLAG, InvocationContext
from .core.npm_utils import PACKAGE_JSON, artifact_name, read_package_json
from .core.pipeline import ValidationPipeline
from .core.prompts import confirm_publishing
from .core.reporting import ElegantReporter, Reporter
from .core.shell import run_script


logger = logging.getLogger(__name__)


class WorkflowError(PublishPleaseError):
    """Fatal precondition failure (e.g. missing package.json)."""
    pass


class ValidationsFailedError(PublishPleaseError):
    """
    One or more validations blocked the release.

    The message is the bullet list of every collected error, in
    registration order.

    Attributes:
        result: The pipeline result that blocked the release
    """

    def __init__(self, result: PipelineResult):
        self.result = result
        super().__init__('\n'.join(f"  * {message}" for message in result.errors))


@dataclass(frozen=True)
class ReleasePlan:
    """What this run will release and how. Built once from the resolved options."""
    publish_command: str
    publish_tag: str = DEFAULT_PUBLISH_TAG
    pre_publish_script: str = ''
    post_publish_script: str = ''
    dry_run: bool = False
    confirm: bool = True

    @classmethod
    def from_options(cls, options: Mapping[str, Any], dry_run: bool = False) -> 'ReleasePlan':
        return cls(
            publish_command=options['publishCommand'],
            publish_tag=options.get('publishTag') or DEFAULT_PUBLISH_TAG,
            pre_publish_script=options.get('prePublishScript') or '',
            post_publish_script=options.get('postPublishScript') or '',
            dry_run=dry_run,
            confirm=bool(options.get('confirm', True)),
        )

    @property
    def release_command(self) -> str:
        return f"{self.publish_command} --tag {self.publish_tag} --{TRUSTED_RELEASE_FLAG}"


class ReleaseWorkflow:
    """
    One guarded release.

    Args:
        project_dir: Directory holding package.json and .publishrc (defaults to cwd)
        overrides: Options that win over .publishrc and the defaults
        reporter: Console reporter (ElegantReporter when omitted)
        confirm: Zero-argument callable returning True to go ahead
            (an interactive y/N prompt when omitted)
        validations: Validation registry (the default registry when omitted)
        context: npm invocation context; its dry-run flag enables dry run
        dry_run: Force dry run on or off (overrides the context flag)
        script_runner: Runs shell commands; raises on non-zero exit
    """

    def __init__(
        self,
        project_dir: Optional[Path] = None,
        overrides: Optional[Mapping[str, Any]] = None,
        reporter: Optional[Reporter] = None,
        confirm: Optional[Callable[[], bool]] = None,
        validations: Optional[Sequence[Validation]] = None,
        context: Optional[InvocationContext] = None,
        dry_run: Optional[bool] = None,
        script_runner: Callable[[str, Path], None] = run_script
    ):
        self.project_dir = Path(project_dir) if project_dir is not None else Path.cwd()
        self.overrides = overrides
        self.reporter = reporter or ElegantReporter()
        self.confirm = confirm or confirm_publishing()
        self.context = context or InvocationContext.empty()
        self.dry_run = self.context.is_dry_run if dry_run is None else dry_run
        self.script_runner = script_runner
        self.result: Optional[PipelineResult] = None

        if validations is None:
            from .validations import default_validations
            validations = default_validations()
        self.validations = validations

    def _require_package_json(self) -> dict:
        if not (self.project_dir / PACKAGE_JSON).is_file():
            logger.error(f"No {PACKAGE_JSON} in {self.project_dir}", extra={'error_code': 'WF-01'})
            raise WorkflowError("package.json file doesn't exist.")
        return read_package_json(self.project_dir)

    def run_validations(self, options: Mapping[str, Any], package: dict) -> PipelineResult:
        self.reporter.report_running_task('Running validations')
        context = ValidationContext(
            project_dir=self.project_dir,
            package=package,
            path_formatter=self.reporter.format_as_elegant_path,
        )
        pipeline = ValidationPipeline(self.validations, reporter=self.reporter)
        return pipeline.run(options.get('validations'), context)

    def run(self) -> str:
        """
        Execute the workflow.

        Returns:
            The release command that was run (computed only, in dry run),
            or "" when the operator declined to publish

        Raises:
            ConfigError: If the options are malformed or invalid
            WorkflowError: If package.json is missing
            ScriptError: If a script or the publish command fails
            ValidationsFailedError: If a validation blocks the release
        """
        options = get_options(self.overrides, self.project_dir)
        package = self._require_package_json()
        plan = ReleasePlan.from_options(options, dry_run=self.dry_run)

        if plan.dry_run:
            self.reporter.report_information('dry mode activated')

        if plan.pre_publish_script:
            self.reporter.report_running_task('Running pre-publish script')
            self.script_runner(plan.pre_publish_script, self.project_dir)

        result = self.run_validations(options, package)
        self.result = result
        if not result.ok:
            self.reporter.report_error_section(result)
            logger.error(
                f"{len(result.failed_outcomes)} validation(s) blocked the release",
                extra={'error_code': 'WF-02'}
            )
            raise ValidationsFailedError(result)

        if plan.confirm and not plan.dry_run and not self.confirm():
            logger.info("Publishing declined by operator")
            return ''

        package_name = str(package.get('name', ''))

        if plan.dry_run:
            self.reporter.report_release_info({
                'Release Command': plan.release_command,
                'Release Tag': plan.publish_tag,
                'Package': artifact_name(package),
            })
            self.reporter.report_success(f"{package_name} is safe to be published.")
            return plan.release_command

        logger.info(f"Publishing {package_name}: {plan.release_command}")
        self.script_runner(plan.release_command, self.project_dir)

        if plan.post_publish_script:
            self.reporter.report_running_task('Running post-publish script')
            self.script_runner(plan.post_publish_script, self.project_dir)

        return plan.release_command


def publish(options: Optional[Mapping[str, Any]] = None, project_dir: Optional[Path] = None, **kwargs) -> str:
    """
    Run a release with option overrides.

    Keyword arguments are passed to ReleaseWorkflow.
    """
    return ReleaseWorkflow(project_dir=project_dir, overrides=options, **kwargs).run()
