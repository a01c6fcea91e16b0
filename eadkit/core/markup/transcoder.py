from __future__ import annotations

import html
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from defusedxml import DefusedXmlException
from defusedxml import ElementTree as DefusedET

from eadkit.core.errors import DecodeError

from .whitespace import cleanup_whitespace

log = logging.getLogger("eadkit.markup")

XLINK_NS = "http://www.w3.org/1999/xlink"

# Rich-text values are inner markup: any number of top-level nodes and bare
# text. They are parsed inside a synthetic element that also binds the xlink
# prefix used by <extref xlink:href="...">.
_FRAGMENT_OPEN = f'<eadkit-fragment xmlns:xlink="{XLINK_NS}">'
_FRAGMENT_CLOSE = "</eadkit-fragment>"

_CLOSE_SPAN = "</span>"
_TARGET_WINDOWS = {"new": "_blank", "replace": "_self"}


class LineBreakMode(str, Enum):
    """How <lb/> is rendered.

    PROSE turns it into a break marker; LITERAL keeps it as a paired
    annotation so titles show the structural break.
    """

    PROSE = "prose"
    LITERAL = "literal"


@dataclass
class _Frame:
    """What an open element emits when it closes."""

    close: str
    unit: Optional[str] = None


_Rule = Callable[[str, Mapping[str, str], LineBreakMode], Tuple[str, _Frame]]


def _local(name: str) -> str:
    return name.split("}", 1)[1] if "}" in name else name


def _attr(attrib: Mapping[str, str], name: str) -> Optional[str]:
    """Look up an attribute by local name, ignoring any namespace."""

    for k, v in attrib.items():
        if _local(k) == name:
            return v
    return None


def _default_rule(name: str, attrib: Mapping[str, str], mode: LineBreakMode) -> Tuple[str, _Frame]:
    return f'<span class="ead-{name}">', _Frame(close=_CLOSE_SPAN)


def _emph_rule(name: str, attrib: Mapping[str, str], mode: LineBreakMode) -> Tuple[str, _Frame]:
    render = _attr(attrib, "render") or ""
    return f'<span class="ead-emph ead-emph-{render}">', _Frame(close=_CLOSE_SPAN)


def _lb_rule(name: str, attrib: Mapping[str, str], mode: LineBreakMode) -> Tuple[str, _Frame]:
    if mode is LineBreakMode.PROSE:
        return "<br>", _Frame(close="")
    return _default_rule(name, attrib, mode)


def _extent_rule(name: str, attrib: Mapping[str, str], mode: LineBreakMode) -> Tuple[str, _Frame]:
    text, frame = _default_rule(name, attrib, mode)
    frame.unit = _attr(attrib, "unit") or None
    return text, frame


def _extref_rule(name: str, attrib: Mapping[str, str], mode: LineBreakMode) -> Tuple[str, _Frame]:
    href = html.escape(_attr(attrib, "href") or "", quote=True)
    window = _TARGET_WINDOWS.get((_attr(attrib, "show") or "").strip().lower())
    if window:
        return f'<a href="{href}" target="{window}">', _Frame(close="</a>")
    return f'<a href="{href}">', _Frame(close="</a>")


# Names missing from this table use the default rule, so schema growth never
# breaks transcoding.
_START_RULES: Dict[str, _Rule] = {
    "emph": _emph_rule,
    "lb": _lb_rule,
    "extent": _extent_rule,
    "extref": _extref_rule,
}


class _AnnotatingTarget:
    """Parser target that turns start/end/data events into annotated text."""

    def __init__(self, mode: LineBreakMode) -> None:
        self._mode = mode
        self._depth = 0
        self._frames: List[_Frame] = []
        self._out: List[str] = []

    def start(self, tag: str, attrib: Mapping[str, str]) -> None:
        self._depth += 1
        if self._depth == 1:
            return
        name = _local(tag).lower()
        rule = _START_RULES.get(name, _default_rule)
        text, frame = rule(name, attrib, self._mode)
        self._out.append(text)
        self._frames.append(frame)

    def end(self, tag: str) -> None:
        self._depth -= 1
        if self._depth == 0:
            return
        frame = self._frames.pop()
        if frame.unit:
            self._out.append(" " + frame.unit)
        self._out.append(frame.close)

    def data(self, text: str) -> None:
        self._out.append(text.replace("\n", " "))

    def close(self) -> str:
        return "".join(self._out)


def transcode(fragment: str, mode: LineBreakMode = LineBreakMode.PROSE) -> str:
    """Flatten one rich-text field's inner markup into annotated text.

    Elements become <span class="ead-NAME"> annotations, with special rules
    for emph, lb, extent and extref. Whitespace is collapsed afterwards.

    Raises DecodeError if the fragment is not well-formed. Entity
    declarations and external references are refused by defusedxml and are
    reported the same way.

    """

    if fragment is None or not fragment.strip():
        return ""

    parser = DefusedET.XMLParser(target=_AnnotatingTarget(mode))
    try:
        parser.feed(_FRAGMENT_OPEN + fragment + _FRAGMENT_CLOSE)
        annotated = parser.close()
    except DefusedET.ParseError as e:
        log.debug("markup_decode_failed", extra={"fragment_len": len(fragment)})
        raise DecodeError(f"malformed markup: {e}") from e
    except DefusedXmlException as e:
        log.debug("markup_decode_refused", extra={"fragment_len": len(fragment)})
        raise DecodeError(f"forbidden markup construct: {e.__class__.__name__}") from e

    return cleanup_whitespace(annotated)


def transcode_literal(fragment: str) -> str:
    """Transcode keeping <lb/> as paired annotations (used for titles)."""

    return transcode(fragment, LineBreakMode.LITERAL)
