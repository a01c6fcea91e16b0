"""Operator-facing diagnostic texts.

Validation results are shown verbatim to archivists, so every message lives
here and tests compare against these builders rather than literals.
"""

from __future__ import annotations

from typing import Iterable, Sequence, Tuple

INVALID_XML = "The XML in this file is not valid.  Please check it using an XML validator."
UNABLE_TO_PARSE = "Unable to parse XML file"
SCHEMA_VALIDATION_FAILED = "schema validation failed"


def missing_required_element(element_name: str) -> str:
    return f"Required element {element_name} not found."


def invalid_eadid(eadid: str, invalid_chars: Sequence[str]) -> str:
    msg = (
        f'Invalid <eadid> "{eadid}": must be 2 to 8 groups of lower-case letters and '
        "digits joined by single underscores, at most 251 bytes."
    )
    if invalid_chars:
        listed = ", ".join(f"'{c}'" for c in invalid_chars)
        msg += f" Invalid characters: {listed}."
    return msg


def invalid_repository(name: str) -> str:
    return f'<repository><corpname> "{name}" is not a recognized repository name.'


def invalid_archdesc_level(level: str, required: str) -> str:
    return f'<archdesc> level "{level}" is not allowed; required level is "{required}".'


def audience_internal(elements: Iterable[str]) -> str:
    return 'Elements with audience="internal" are not allowed: ' + ", ".join(elements) + "."


def invalid_dao_hrefs(offenders: Iterable[Tuple[str, str]]) -> str:
    lines = [f'{title or "(untitled)"}: "{href}"' for title, href in offenders]
    return "<dao> href values that are not absolute URIs:\n" + "\n".join(lines)


def unrecognized_relator_codes(offenders: Iterable[Tuple[str, str]]) -> str:
    lines = [f'{element}: "{code}"' for element, code in offenders]
    return "Unrecognized relator codes:\n" + "\n".join(lines)


def rule_failed(rule_id: str, error: BaseException) -> str:
    return f"Rule {rule_id} could not be evaluated: {error.__class__.__name__}"
