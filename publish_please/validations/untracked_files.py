from typing import Any, List

from ..core import git_utils
from ..core.base import Validation, ValidationContext


class UntrackedFilesValidation(Validation):
    """Every file that is not git-ignored must be under version control."""

    key = 'untrackedFiles'
    status_text = 'Checking for the untracked files'
    default_enabled = True

    def configure(self, current_value: Any, prompter) -> Any:
        return prompter.confirm(
            'Would you like to verify that there are no files in your working tree '
            'that are not under version control before publishing?',
            default=current_value is not False
        )

    def run(self, options: Any, context: ValidationContext) -> List[str]:
        if git_utils.has_untracked_files(context.project_dir):
            return ['There are untracked files in the working tree.']
        return []
