"""Branch validation: the release must come from the configured branch."""

import re
from typing import Any, List

from ..core import git_utils
from ..core.base import Validation, ValidationContext


DEFAULT_BRANCH = 'master'


def is_pattern(value: str) -> bool:
    """'/(^master$|^release$)/' style values are regular expressions."""
    return len(value) > 1 and value.startswith('/') and value.endswith('/')


class BranchValidation(Validation):
    """
    Compares the checked out branch with a literal name or a /regex/.

    A detached HEAD never matches a literal branch name; git reports it as
    "(HEAD detached at <sha>)".
    """

    key = 'branch'
    status_text = 'Validating branch'
    default_enabled = DEFAULT_BRANCH

    def configure(self, current_value: Any, prompter) -> Any:
        default = current_value if isinstance(current_value, str) else DEFAULT_BRANCH
        return prompter.input(
            'Which branch should be used for publishing? (wrap it in slashes for a regular expression)',
            default
        )

    def run(self, options: Any, context: ValidationContext) -> List[str]:
        expected = options if isinstance(options, str) else DEFAULT_BRANCH
        branch = git_utils.current_branch(context.project_dir)

        if is_pattern(expected):
            if re.search(expected[1:-1], branch):
                return []
            return [f"Expected branch to match {expected}, but it was '{branch}'."]

        if branch == expected:
            return []
        return [f"Expected branch to be '{expected}', but it was '{branch}'."]
