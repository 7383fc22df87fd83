"""Git tag validation: the latest commit must be tagged with the package version."""

from typing import Any, List

from ..core import git_utils
from ..core.base import Validation, ValidationContext, ValidationFailure


DEFAULT_TAG_PREFIX = 'v'


class GitTagValidation(Validation):
    """
    The tag on HEAD must be "<version>" or "<prefix><version>".

    Options:
        True: prefix "v"
        str: custom prefix, e.g. "foo-v" accepts "foo-v1.3.77"
    """

    key = 'gitTag'
    status_text = 'Validating git tag'
    default_enabled = True

    def configure(self, current_value: Any, prompter) -> Any:
        return prompter.confirm(
            'Would you like to verify that published commit has git tag which is equal to package version?',
            default=current_value is not False
        )

    def run(self, options: Any, context: ValidationContext) -> List[str]:
        prefix = options if isinstance(options, str) else DEFAULT_TAG_PREFIX
        version = context.package_version

        tag = git_utils.head_tag(context.project_dir)
        if tag is None:
            raise ValidationFailure("Latest commit doesn't have git tag.")

        if tag in (version, f"{prefix}{version}"):
            return []
        return [f"Expected git tag to be '{version}' or '{prefix}{version}', but it was '{tag}'."]
