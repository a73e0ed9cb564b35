"""
Font loading and text measurement for the print layout.

Fonts are resolved from a fixed preference list so the same machine
always measures, and therefore wraps, text identically.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import List, Union

from PIL import ImageFont

logger = logging.getLogger(__name__)

Font = Union[ImageFont.FreeTypeFont, ImageFont.ImageFont]

# Serif first (printed papers), DejaVu for wide Unicode coverage of math symbols
_FONT_OPTIONS = {
    (False, False): ["times.ttf", "Times New Roman.ttf", "DejaVuSerif.ttf", "DejaVuSans.ttf", "arial.ttf"],
    (True, False): ["timesbd.ttf", "Times New Roman Bold.ttf", "DejaVuSerif-Bold.ttf", "DejaVuSans-Bold.ttf", "arialbd.ttf"],
    (False, True): ["timesi.ttf", "Times New Roman Italic.ttf", "DejaVuSerif-Italic.ttf", "DejaVuSans-Oblique.ttf", "ariali.ttf"],
    (True, True): ["timesbi.ttf", "Times New Roman Bold Italic.ttf", "DejaVuSerif-BoldItalic.ttf", "DejaVuSans-BoldOblique.ttf", "arialbi.ttf"],
}


@lru_cache(maxsize=64)
def load_font(size: int, bold: bool = False, italic: bool = False) -> Font:
    """
    Load a TrueType font of ``size`` pixels.

    Falls back to Pillow's built-in font if none of the candidates exist.
    """
    for font_name in _FONT_OPTIONS[(bold, italic)]:
        try:
            return ImageFont.truetype(font_name, size)
        except (IOError, OSError):
            continue

    logger.warning(f"Could not load TrueType font (size {size}), using default")
    return ImageFont.load_default(size=size)


def text_width(text: str, font: Font) -> float:
    return font.getlength(text)


def wrap_text(text: str, font: Font, max_width: int) -> List[str]:
    """
    Greedy word wrap to ``max_width`` pixels.

    Explicit newlines are kept. A word wider than the line is broken
    between characters.
    """
    lines: List[str] = []
    for paragraph in text.split("\n"):
        words = paragraph.split()
        if not words:
            lines.append("")
            continue
        current = ""
        for word in words:
            candidate = f"{current} {word}" if current else word
            if text_width(candidate, font) <= max_width:
                current = candidate
                continue
            if current:
                lines.append(current)
            current = ""
            while text_width(word, font) > max_width and len(word) > 1:
                cut = len(word) - 1
                while cut > 1 and text_width(word[:cut], font) > max_width:
                    cut -= 1
                lines.append(word[:cut])
                word = word[cut:]
            current = word
        lines.append(current)
    return lines
