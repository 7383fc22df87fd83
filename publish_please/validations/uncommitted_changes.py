from typing import Any, List

from ..core import git_utils
from ..core.base import Validation, ValidationContext


class UncommittedChangesValidation(Validation):
    """Tracked files must match HEAD."""

    key = 'uncommittedChanges'
    status_text = 'Checking for the uncommitted changes'
    default_enabled = True

    def configure(self, current_value: Any, prompter) -> Any:
        return prompter.confirm(
            'Would you like to verify that there are no uncommitted changes in your working tree before publishing?',
            default=current_value is not False
        )

    def run(self, options: Any, context: ValidationContext) -> List[str]:
        if git_utils.has_uncommitted_changes(context.project_dir):
            return ['There are uncommitted changes in the working tree.']
        return []
