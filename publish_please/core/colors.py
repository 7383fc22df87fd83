"""
Terminal color utilities for publish-please.

Provides ANSI color codes and formatting helpers for the elegant reporter.
No external dependencies - uses standard ANSI escape codes.

Colors are emitted only when explicitly enabled or, by default,
when sys.stdout is a TTY.
"""

import re
import sys
from typing import List, Optional


ANSI_PATTERN = re.compile(r'\x1b\[[0-9;]*m')


class Colors:
    """ANSI color codes for terminal output."""
    # Basic colors
    RED = '\033[31m'
    GREEN = '\033[32m'
    YELLOW = '\033[33m'
    BLUE = '\033[34m'
    MAGENTA = '\033[35m'
    CYAN = '\033[36m'

    # Text formatting
    BOLD = '\033[1m'
    DIM = '\033[2m'

    # Reset
    RESET = '\033[0m'

    # Combinations
    BOLD_RED = '\033[1;31m'
    BOLD_GREEN = '\033[1;32m'
    BG_RED = '\033[41m'


def colorize(text: str, color: str, enabled: Optional[bool] = None) -> str:
    """
    Add color to text.

    Args:
        text: Text to colorize
        color: ANSI color code from Colors class
        enabled: Force colors on or off; None means "only on a TTY"

    Returns:
        Colored text if enabled, plain text otherwise
    """
    if enabled is None:
        enabled = sys.stdout.isatty()
    if enabled:
        return f"{color}{text}{Colors.RESET}"
    return text


def strip_ansi(text: str) -> str:
    """Remove ANSI escape codes (used for width calculations)."""
    return ANSI_PATTERN.sub('', text)


def success(text: str, enabled: Optional[bool] = None) -> str:
    """Format text as success (green)."""
    return colorize(text, Colors.GREEN, enabled)


def error(text: str, enabled: Optional[bool] = None) -> str:
    """Format text as error (red)."""
    return colorize(text, Colors.RED, enabled)


def warning(text: str, enabled: Optional[bool] = None) -> str:
    """Format text as warning (yellow)."""
    return colorize(text, Colors.YELLOW, enabled)


def info(text: str, enabled: Optional[bool] = None) -> str:
    """Format text as info (blue)."""
    return colorize(text, Colors.BLUE, enabled)


def bold(text: str, enabled: Optional[bool] = None) -> str:
    """Format text as bold."""
    return colorize(text, Colors.BOLD, enabled)


def dim(text: str, enabled: Optional[bool] = None) -> str:
    """Format text as dim."""
    return colorize(text, Colors.DIM, enabled)


def box_lines(lines: List[str], title: str = "", width: int = 60, enabled: Optional[bool] = None) -> List[str]:
    """
    Render text in a bordered box.

    Args:
        lines: Strings to print inside the box (may contain ANSI codes)
        title: Optional title for top of box
        width: Width of box in characters
        enabled: Color the border (see colorize)

    Returns:
        Box rows, ready to print

    Example:
        for row in box_lines(["command: npm publish"], title="Release info"):
            print(row)
    """
    top_left, top_right = '╭', '╮'
    bottom_left, bottom_right = '╰', '╯'
    horizontal, vertical = '─', '│'

    if title:
        title_text = f" {title} "
        padding = (width - len(title_text) - 2) // 2
        top_line = (
            top_left + horizontal * padding +
            title_text +
            horizontal * (width - len(title_text) - padding - 2) +
            top_right
        )
    else:
        top_line = top_left + horizontal * (width - 2) + top_right

    border = colorize(vertical, Colors.BOLD, enabled)
    rows = [colorize(top_line, Colors.BOLD, enabled)]

    for line in lines:
        clean_line = strip_ansi(line)

        # Truncate lines that exceed box width (room for borders and padding)
        max_content_width = width - 6
        if len(clean_line) > max_content_width:
            line = clean_line[:max_content_width - 3] + "..."
            clean_line = line

        padding = max(0, width - len(clean_line) - 4)
        rows.append(border + f"  {line}" + ' ' * padding + border)

    rows.append(colorize(bottom_left + horizontal * (width - 2) + bottom_right, Colors.BOLD, enabled))
    return rows
