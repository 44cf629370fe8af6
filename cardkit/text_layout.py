"""Text measurement and line wrapping.

Wrapping only needs something that can measure a string's rendered width,
so it can be driven by a real font or by a fake measurer in tests. Output
depends only on the text, the width limit, the line limit and the font
metrics.
"""

import re
from typing import Iterable, Protocol

from PIL import ImageFont

# Split on whitespace runs and hyphens, keeping the delimiters as tokens
_BREAK_PATTERN = re.compile(r"(\s+|-)")


class TextMeasurer(Protocol):
    def measure(self, text: str) -> float:
        ...


class FontMeasurer:
    """Measures text with a Pillow font plus per-character letter spacing.

    Letter spacing is added after every character, trailing one included,
    which matches how the drawing side advances the pen.
    """

    def __init__(self, font: ImageFont.FreeTypeFont, letter_spacing: float = 0.0):
        self.font = font
        self.letter_spacing = letter_spacing

    def measure(self, text: str) -> float:
        if not text:
            return 0.0
        return self.font.getlength(text) + self.letter_spacing * len(text)


def _force_breaks(
    measurer: TextMeasurer,
    line: str,
    max_width: float,
    out: list[str],
    max_lines: int,
) -> None:
    remaining = line
    while remaining and len(out) < max_lines:
        break_point = len(remaining)
        for i in range(1, len(remaining) + 1):
            if measurer.measure(remaining[:i]) > max_width:
                break_point = max(1, i - 1)
                break
        out.append(remaining[:break_point])
        remaining = remaining[break_point:]


def wrap_text(
    measurer: TextMeasurer,
    text: str,
    max_width: float,
    max_lines: int = 2,
) -> list[str]:
    """Wrap ``text`` into at most ``max_lines`` lines no wider than ``max_width``.

    Breaks on whitespace and hyphens first (a hyphen stays at the end of the
    line it closes); words with no break point are split character by
    character. Anything beyond ``max_lines`` is dropped without an ellipsis.
    """
    if measurer.measure(text) <= max_width:
        return [text.strip()]

    lines: list[str] = []
    current = ""
    for part in _BREAK_PATTERN.split(text):
        if not part:
            continue
        candidate = current + part
        if measurer.measure(candidate) > max_width and current:
            lines.append(current.strip())
            if part == "-":
                lines[-1] += "-"
                current = ""
            else:
                current = part
        else:
            current = candidate

    if current.strip():
        lines.append(current.strip())

    result: list[str] = []
    for line in lines:
        if measurer.measure(line) > max_width:
            _force_breaks(measurer, line, max_width, result, max_lines)
        else:
            result.append(line)
        if len(result) >= max_lines:
            break

    return result[:max_lines]


def widest_line(measurer: TextMeasurer, lines: Iterable[str]) -> float:
    """Width of the widest line, 0 for no lines."""
    return max((measurer.measure(line) for line in lines), default=0.0)
