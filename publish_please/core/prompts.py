"""
Interactive prompts.

Prompter is the seam between the workflow/configurator and the terminal.
Tests replace it with a scripted object exposing the same two methods.
"""

from typing import Callable, Optional


class Prompter:
    """
    input()-based y/N and free-text questions.

    Args:
        input_fn: Line reader (defaults to builtin input)
    """

    def __init__(self, input_fn: Optional[Callable[[str], str]] = None):
        self._input = input_fn or input

    def confirm(self, question: str, default: bool = False) -> bool:
        """
        Ask a yes/no question. An empty answer (or EOF) picks the default.
        """
        hint = '[Y/n]' if default else '[y/N]'
        try:
            answer = self._input(f"{question} {hint}: ").strip().lower()
        except EOFError:
            return default
        if not answer:
            return default
        return answer in ('y', 'yes')

    def input(self, question: str, default: str = '') -> str:
        """Ask for a line of text. An empty answer (or EOF) picks the default."""
        suffix = f" ({default})" if default else ''
        try:
            answer = self._input(f"{question}{suffix}: ").strip()
        except EOFError:
            return default
        return answer or default


def confirm_publishing(prompter: Optional[Prompter] = None) -> Callable[[], bool]:
    """Confirmation callable for the release workflow."""
    prompter = prompter or Prompter()
    return lambda: prompter.confirm('Are you sure you want to publish this version?', default=False)
