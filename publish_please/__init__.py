"""
publish-please - safe replacement for `npm publish`.

Runs pre-release validations (branch, git tag, working tree, sensitive data,
vulnerable dependencies) before publishing, and installs a guard hook that
rejects a bare `npm publish`.
"""

__version__ = "0.1.0"
__license__ = "MIT"

__all__ = [
    "__version__",
    "__license__",
]
