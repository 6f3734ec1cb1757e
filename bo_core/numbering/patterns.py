# bo_core/numbering/patterns.py
"""
Number patterns: literal text plus bracketed placeholders.

  [YYYY] [YY] [MM] [DD]   parts of the allocation date
  [2DIGIT] .. [8DIGIT]    the sequence, zero-padded to at least n digits

Exactly one sequence placeholder is required.
"""
from __future__ import annotations

import re
from datetime import date

DATE_PLACEHOLDERS = ("[YYYY]", "[YY]", "[MM]", "[DD]")
DIGIT_PLACEHOLDERS = tuple(f"[{n}DIGIT]" for n in range(2, 9))
VALID_PLACEHOLDERS = frozenset(DATE_PLACEHOLDERS + DIGIT_PLACEHOLDERS)

DEFAULT_FORMATS = {
    "order": "ORD[YY][3DIGIT][MM][DD]",
    "invoice": "[MM][4DIGIT][YY][DD]",
    "quote": "[MM][4DIGIT][YY][DD]",
}
FALLBACK_FORMAT = "[4DIGIT]"

PREVIEW_SEQUENCE = 42

_TOKEN_RE = re.compile(r"\[[^\]]*\]")
_DIGIT_RE = re.compile(r"\[(\d)DIGIT\]")


class InvalidPattern(ValueError):
    pass


def default_pattern(entity_kind: str) -> str:
    return DEFAULT_FORMATS.get(entity_kind, FALLBACK_FORMAT)


def validate_pattern(pattern: str) -> None:
    """Raise InvalidPattern with the reason; return None when usable."""
    if not pattern:
        raise InvalidPattern("Format cannot be empty")

    digit_tokens = _DIGIT_RE.findall(pattern)
    if not digit_tokens:
        raise InvalidPattern("Format must contain one sequence placeholder like [4DIGIT]")
    if len(digit_tokens) > 1:
        raise InvalidPattern("Format can only contain one sequence placeholder")

    for token in _TOKEN_RE.findall(pattern):
        if token not in VALID_PLACEHOLDERS:
            raise InvalidPattern(f"Unknown placeholder {token}")


def period_key(pattern: str, day: date) -> str:
    """
    Which counter an allocation on `day` draws from. Patterns without any
    date placeholder count per calendar year.
    """
    key = ""
    if "[YYYY]" in pattern:
        key += f"{day.year:04d}"
    elif "[YY]" in pattern:
        key += f"{day.year % 100:02d}"
    if "[MM]" in pattern:
        key += f"{day.month:02d}"
    if "[DD]" in pattern:
        key += f"{day.day:02d}"
    return key or f"{day.year:04d}"


def render(pattern: str, day: date, sequence: int) -> str:
    width = int(_DIGIT_RE.search(pattern).group(1))
    out = (
        pattern.replace("[YYYY]", f"{day.year:04d}")
        .replace("[YY]", f"{day.year % 100:02d}")
        .replace("[MM]", f"{day.month:02d}")
        .replace("[DD]", f"{day.day:02d}")
    )
    # zfill pads to the minimum width and never truncates
    return _DIGIT_RE.sub(lambda _m: str(sequence).zfill(width), out, count=1)


def preview(pattern: str, *, day: date | None = None) -> str:
    validate_pattern(pattern)
    return render(pattern, day or date.today(), PREVIEW_SEQUENCE)
