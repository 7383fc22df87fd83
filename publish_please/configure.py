"""
Interactive configuration (`publish-please config`).

Walks the release options, then each validation's own configure() step,
and writes the answers to .publishrc.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from .core.base import Validation
from .core.config import get_options, save_options, thaw
from .core.prompts import Prompter


logger = logging.getLogger(__name__)


def _configure_script(prompter: Prompter, question: str, input_question: str, current: str) -> str:
    if not prompter.confirm(question, default=bool(current)):
        return ''
    return prompter.input(input_question, current)


def configure_options(
    options: Dict[str, Any],
    prompter: Prompter,
    validations: Sequence[Validation]
) -> Dict[str, Any]:
    """
    Ask for every option, starting from the current values.

    Returns:
        New options (the input is not modified)
    """
    answers = dict(options)

    answers['prePublishScript'] = _configure_script(
        prompter,
        'Do you want to run any scripts before publishing (e.g. build steps, tests)?',
        'Input pre-publish script',
        options.get('prePublishScript', '')
    )
    answers['postPublishScript'] = _configure_script(
        prompter,
        'Do you want to run any scripts after successful publishing (e.g. release announcements, binary uploading)?',
        'Input post-publish script',
        options.get('postPublishScript', '')
    )
    answers['publishCommand'] = prompter.input(
        'Specify publishing command which will be used to publish your package',
        options.get('publishCommand', 'npm publish')
    )
    answers['publishTag'] = prompter.input(
        'Specify release tag with which your package will be published',
        options.get('publishTag', 'latest')
    )
    answers['confirm'] = prompter.confirm(
        'Do you want manually confirm publishing?',
        default=bool(options.get('confirm', True))
    )

    current_validations = dict(options.get('validations', {}))
    answers['validations'] = {
        validation.key: validation.configure(
            current_validations.get(validation.key, validation.default_enabled),
            prompter
        )
        for validation in validations
    }
    return answers


def run_configurator(
    project_dir: Path,
    prompter: Optional[Prompter] = None,
    validations: Optional[Sequence[Validation]] = None
) -> Path:
    """
    Configure a project interactively and save .publishrc.

    Returns:
        Path of the written .publishrc
    """
    prompter = prompter or Prompter()
    if validations is None:
        from .validations import default_validations
        validations = default_validations()

    current = thaw(get_options(project_dir=project_dir))
    answers = configure_options(current, prompter, validations)
    logger.debug(f"Configured options: {answers}")
    return save_options(answers, project_dir)
