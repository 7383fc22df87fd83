"""
Git validations against a real repository.

Skipped when git is not installed.
"""

import json
import shutil
import subprocess
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from publish_please.core.base import ValidationContext
from publish_please.core.pipeline import ValidationPipeline
from publish_please.validations.branch import BranchValidation
from publish_please.validations.git_tag import GitTagValidation
from publish_please.validations.uncommitted_changes import UncommittedChangesValidation
from publish_please.validations.untracked_files import UntrackedFilesValidation


pytestmark = pytest.mark.skipif(shutil.which('git') is None, reason="git not installed")

PACKAGE = {'name': 'testing-repo', 'version': '1.3.77', 'scripts': {}}


def git(repo: Path, *args: str) -> None:
    subprocess.run(['git', *args], cwd=repo, check=True, capture_output=True)


@pytest.fixture
def repo(tmp_path):
    """Committed repository checked out on branch 'release'."""
    git(tmp_path, 'init')
    git(tmp_path, 'config', 'user.email', 'release@example.com')
    git(tmp_path, 'config', 'user.name', 'Release Bot')
    git(tmp_path, 'config', 'commit.gpgsign', 'false')
    (tmp_path / 'package.json').write_text(json.dumps(PACKAGE))
    git(tmp_path, 'add', 'package.json')
    git(tmp_path, 'commit', '-m', 'Initial commit')
    git(tmp_path, 'checkout', '-b', 'release')
    return tmp_path


def context_for(repo: Path) -> ValidationContext:
    return ValidationContext(repo, dict(PACKAGE))


class TestBranch:

    def test_matching_branch(self, repo):
        assert BranchValidation().run('release', context_for(repo)) == []

    def test_wrong_branch(self, repo):
        errors = BranchValidation().run('master', context_for(repo))
        assert errors == ["Expected branch to be 'master', but it was 'release'."]

    def test_regex_branch(self, repo):
        assert BranchValidation().run('/^rel/', context_for(repo)) == []


class TestGitTag:

    def test_untagged_commit(self, repo):
        result = ValidationPipeline([GitTagValidation()]).run({}, context_for(repo))
        assert result.errors == ["Latest commit doesn't have git tag."]

    def test_prefixed_tag(self, repo):
        git(repo, 'tag', 'v1.3.77')
        assert GitTagValidation().run(True, context_for(repo)) == []

    def test_mismatched_tag(self, repo):
        git(repo, 'tag', 'v1.3.76')
        errors = GitTagValidation().run(True, context_for(repo))
        assert errors == ["Expected git tag to be '1.3.77' or 'v1.3.77', but it was 'v1.3.76'."]


class TestWorkingTree:

    def test_clean_tree(self, repo):
        context = context_for(repo)
        assert UncommittedChangesValidation().run(True, context) == []
        assert UntrackedFilesValidation().run(True, context) == []

    def test_modified_file(self, repo):
        (repo / 'package.json').write_text('{}')
        assert UncommittedChangesValidation().run(True, context_for(repo)) != []

    def test_untracked_file_is_not_an_uncommitted_change(self, repo):
        (repo / 'notes.txt').write_text('draft')
        context = context_for(repo)

        assert UncommittedChangesValidation().run(True, context) == []
        assert UntrackedFilesValidation().run(True, context) != []
