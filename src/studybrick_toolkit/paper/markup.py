"""
Module: paper.markup

Purpose:
    Math markup embedded in question content and options. One delimiter
    grammar and one rendering pass, used by both the interactive rows and
    the print layout, so an exported paper shows exactly what the preview
    showed.

    Delimiters (first match wins at each position):
        $$...$$   display
        \\[...\\]   display
        \\(...\\)   inline
        $...$     inline

    An opening delimiter without a closing one is literal text, and
    ``\\$`` is a literal dollar sign.

    Math is rendered to plain Unicode: Greek letters and operators by
    name, ``^``/``_`` to super/subscript characters where they exist,
    ``\\frac{a}{b}`` to ``a⁄b`` and ``\\sqrt{x}`` to ``√x``.

Key Classes:
    - Segment: Text or math run

Key Functions:
    - parse_markup(): Text -> segments
    - latex_to_unicode(): Math source -> Unicode text
    - render_markup(): Text -> display text (the single rendering pass)

Used By:
    - paper.composer
    - paper.interactive
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Tuple

logger = logging.getLogger(__name__)

# (open, close, display); order matters: "$$" must be tried before "$"
DELIMITERS: Tuple[Tuple[str, str, bool], ...] = (
    ("$$", "$$", True),
    ("\\[", "\\]", True),
    ("\\(", "\\)", False),
    ("$", "$", False),
)


@dataclass(frozen=True)
class Segment:
    """A run of plain text, or the source of one math expression."""

    text: str
    is_math: bool = False
    display: bool = False


def parse_markup(text: str) -> List[Segment]:
    """
    Split ``text`` into plain and math segments.

    Example:
        >>> [s.is_math for s in parse_markup("Area $r^2$ cm")]
        [False, True, False]
    """
    segments: List[Segment] = []
    buffer: List[str] = []
    i = 0
    n = len(text)

    def flush() -> None:
        if buffer:
            segments.append(Segment("".join(buffer)))
            buffer.clear()

    while i < n:
        if text.startswith("\\$", i):
            buffer.append("$")
            i += 2
            continue

        for opener, closer, display in DELIMITERS:
            if not text.startswith(opener, i):
                continue
            start = i + len(opener)
            end = text.find(closer, start)
            if end <= start:
                continue
            flush()
            segments.append(Segment(text[start:end], is_math=True, display=display))
            i = end + len(closer)
            break
        else:
            buffer.append(text[i])
            i += 1

    flush()
    return segments


# ─────────────────────────────────────────────────────────────────────────────
# LaTeX -> Unicode
# ─────────────────────────────────────────────────────────────────────────────

_SYMBOLS = {
    # Greek
    "alpha": "α", "beta": "β", "gamma": "γ", "delta": "δ", "epsilon": "ε",
    "varepsilon": "ε", "zeta": "ζ", "eta": "η", "theta": "θ", "vartheta": "ϑ",
    "iota": "ι", "kappa": "κ", "lambda": "λ", "mu": "μ", "nu": "ν", "xi": "ξ",
    "pi": "π", "rho": "ρ", "sigma": "σ", "tau": "τ", "upsilon": "υ",
    "phi": "φ", "varphi": "φ", "chi": "χ", "psi": "ψ", "omega": "ω",
    "Gamma": "Γ", "Delta": "Δ", "Theta": "Θ", "Lambda": "Λ", "Xi": "Ξ",
    "Pi": "Π", "Sigma": "Σ", "Phi": "Φ", "Psi": "Ψ", "Omega": "Ω",
    # Operators and relations
    "times": "×", "cdot": "·", "div": "÷", "pm": "±", "mp": "∓",
    "leq": "≤", "le": "≤", "geq": "≥", "ge": "≥", "neq": "≠", "ne": "≠",
    "approx": "≈", "equiv": "≡", "sim": "∼", "propto": "∝", "infty": "∞",
    "to": "→", "rightarrow": "→", "leftarrow": "←", "Rightarrow": "⇒",
    "Leftarrow": "⇐", "leftrightarrow": "↔", "Leftrightarrow": "⇔",
    "rightleftharpoons": "⇌", "uparrow": "↑", "downarrow": "↓",
    "partial": "∂", "nabla": "∇", "sum": "∑", "prod": "∏", "int": "∫",
    "oint": "∮", "in": "∈", "notin": "∉", "subset": "⊂", "subseteq": "⊆",
    "cup": "∪", "cap": "∩", "emptyset": "∅", "forall": "∀", "exists": "∃",
    "angle": "∠", "perp": "⊥", "parallel": "∥", "therefore": "∴",
    "because": "∵", "circ": "°", "degree": "°", "hbar": "ℏ", "ell": "ℓ",
    "ldots": "…", "cdots": "⋯", "dots": "…", "prime": "′",
    # Named functions render upright, as their names
    "sin": "sin", "cos": "cos", "tan": "tan", "cot": "cot", "sec": "sec",
    "csc": "csc", "log": "log", "ln": "ln", "exp": "exp", "lim": "lim",
    "max": "max", "min": "min",
    # Escaped characters
    "{": "{", "}": "}", "%": "%", "$": "$", "&": "&", "#": "#", "_": "_",
    "\\": " ",
}

_SPACES = {",", ";", ":", " ", "quad", "qquad"}
_IGNORED = {"!", "left", "right", "displaystyle", "limits", "big", "Big", "bigl", "bigr"}
_TEXT_COMMANDS = {"text", "mbox", "mathrm", "mathbf", "mathit", "operatorname", "vec", "overline"}

_SUPERSCRIPTS = dict(zip(
    "0123456789+-=()abcdefghijklmnoprstuvwxyzT",
    "⁰¹²³⁴⁵⁶⁷⁸⁹⁺⁻⁼⁽⁾ᵃᵇᶜᵈᵉᶠᵍʰⁱʲᵏˡᵐⁿᵒᵖʳˢᵗᵘᵛʷˣʸᶻᵀ",
))
_SUBSCRIPTS = dict(zip(
    "0123456789+-=()aehijklmnoprstuvx",
    "₀₁₂₃₄₅₆₇₈₉₊₋₌₍₎ₐₑₕᵢⱼₖₗₘₙₒₚᵣₛₜᵤᵥₓ",
))


def _read_command(src: str, i: int) -> Tuple[str, int]:
    """Read ``\\name`` (letters) or ``\\c`` (one symbol) starting at ``src[i]``."""
    j = i + 1
    if j < len(src) and src[j].isalpha():
        while j < len(src) and src[j].isalpha():
            j += 1
        return src[i + 1:j], j
    return src[i + 1:i + 2], min(i + 2, len(src))


def _read_group(src: str, i: int) -> Tuple[str, int]:
    """Read a ``{...}`` group, a command, or a single character."""
    n = len(src)
    while i < n and src[i] == " ":
        i += 1
    if i >= n:
        return "", i
    if src[i] == "{":
        depth = 0
        for j in range(i, n):
            if src[j] == "{":
                depth += 1
            elif src[j] == "}":
                depth -= 1
                if depth == 0:
                    return src[i + 1:j], j + 1
        return src[i + 1:], n
    if src[i] == "\\":
        _, j = _read_command(src, i)
        return src[i:j], j
    return src[i], i + 1


def _simple(text: str) -> bool:
    return len(text) <= 1 or text.isalnum()


def _script(text: str, marker: str) -> str:
    table = _SUPERSCRIPTS if marker == "^" else _SUBSCRIPTS
    if text and all(ch in table for ch in text):
        return "".join(table[ch] for ch in text)
    return f"{marker}{text}" if _simple(text) else f"{marker}({text})"


def _fraction(numerator: str, denominator: str) -> str:
    top = numerator if _simple(numerator) else f"({numerator})"
    bottom = denominator if _simple(denominator) else f"({denominator})"
    return f"{top}⁄{bottom}"


def _root(radicand: str, index: str) -> str:
    sign = {"": "√", "3": "∛", "4": "∜"}.get(index.strip())
    if sign is None:
        sign = _script(index.strip(), "^") + "√"
    return sign + (radicand if _simple(radicand) else f"({radicand})")


def latex_to_unicode(latex: str) -> str:
    """
    Render a math expression's source as Unicode text.

    Unknown commands render as their bare names.

    Example:
        >>> latex_to_unicode(r"\\frac{1}{2} mv^2")
        '1⁄2 mv²'
    """
    out: List[str] = []
    i = 0
    n = len(latex)
    while i < n:
        ch = latex[i]
        if ch == "\\":
            name, i = _read_command(latex, i)
            if name in ("frac", "dfrac", "tfrac"):
                numerator, i = _read_group(latex, i)
                denominator, i = _read_group(latex, i)
                out.append(_fraction(latex_to_unicode(numerator), latex_to_unicode(denominator)))
            elif name == "sqrt":
                index = ""
                if i < n and latex[i] == "[":
                    close = latex.find("]", i)
                    if close != -1:
                        index, i = latex[i + 1:close], close + 1
                radicand, i = _read_group(latex, i)
                out.append(_root(latex_to_unicode(radicand), index))
            elif name in _TEXT_COMMANDS:
                argument, i = _read_group(latex, i)
                out.append(argument if name in ("text", "mbox") else latex_to_unicode(argument))
            elif name in _SPACES:
                out.append(" ")
            elif name in _IGNORED:
                continue
            else:
                out.append(_SYMBOLS.get(name, name))
        elif ch in "^_":
            argument, i = _read_group(latex, i + 1)
            out.append(_script(latex_to_unicode(argument), ch))
        elif ch == "{":
            argument, i = _read_group(latex, i)
            out.append(latex_to_unicode(argument))
        elif ch == "}":
            i += 1
        elif ch == "~":
            out.append(" ")
            i += 1
        else:
            out.append(ch)
            i += 1
    return "".join(out)


def render_markup(text: str) -> str:
    """
    Render content with embedded math to display text.

    This is the only rendering pass; both layouts call it.

    Example:
        >>> render_markup("Find $x$ if $x^2 = 4$")
        'Find x if x² = 4'
    """
    if not text:
        return ""
    return "".join(
        latex_to_unicode(segment.text).strip() if segment.is_math else segment.text
        for segment in parse_markup(text)
    )
