from __future__ import annotations

import re
from typing import Iterable, List

_WHITESPACE_RUNS = re.compile(r"\r+|\n+|\t+|( )+")
_BRACKETED_TEXT = re.compile(r"\[.+\]")


def cleanup_whitespace(s: str) -> str:
    """Collapse carriage returns, newlines, tabs and spaces to single spaces.

    The substitution runs twice because replacing mixed runs such as
    "\\n\\t" yields adjacent spaces. The result is trimmed, and applying the
    function to its own output is a no-op.

    """

    result = _WHITESPACE_RUNS.sub(" ", s or "")
    result = _WHITESPACE_RUNS.sub(" ", result)
    return result.strip()


def filter_label(s: str) -> str:
    """Drop bracketed text (e.g. "[35006000000001]" barcodes) from a label."""

    return cleanup_whitespace(_BRACKETED_TEXT.sub("", s or ""))


def filter_strings(values: Iterable[str]) -> List[str]:
    """Whitespace-clean each string; used for donor names and similar lists."""

    return [cleanup_whitespace(v) for v in values]
