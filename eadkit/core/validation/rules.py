from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Tuple
from urllib.parse import urlsplit

from eadkit.core.document import attr, children, find_path, first_child, iter_local, local_name, text_content
from eadkit.core.markup import cleanup_whitespace

from . import messages
from .profile import DEFAULT_ARCHDESC_LEVEL, DEFAULT_REPOSITORIES
from .relators import is_relator_code

EADID_PATTERN = re.compile(r"[a-z0-9]+(?:_[a-z0-9]+){1,7}")
MAX_EADID_BYTES = 251

_EADID_ALLOWED = frozenset("abcdefghijklmnopqrstuvwxyz0123456789_")
_URI_SCHEME = re.compile(r"[A-Za-z][A-Za-z0-9+.\-]*")


def _freeze_mapping(value: Optional[Mapping[str, Any]]) -> MappingProxyType:
    if value is None:
        return MappingProxyType({})

    if not isinstance(value, Mapping):
        raise TypeError("metadata must be a mapping")

    copied: Dict[str, Any] = dict(value)
    for k in copied.keys():
        if not isinstance(k, str):
            raise TypeError("metadata keys must be strings")

    return MappingProxyType(copied)


@dataclass(frozen=True)
class ValidationContext:
    """
    Input snapshot for business-rule evaluation.

    root is the parsed document; rules only read it.
    metadata is an immutable mappingproxy (e.g. source file name).
    """

    root: ET.Element
    metadata: MappingProxyType = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self) -> None:
        object.__setattr__(self, "metadata", _freeze_mapping(self.metadata))


@dataclass(frozen=True)
class RuleViolation:
    rule_id: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"rule_id": self.rule_id, "message": self.message}


class ValidationRule:
    rule_id: str = "validation-rule"

    def evaluate(self, context: ValidationContext) -> Optional[RuleViolation]:
        raise NotImplementedError


@dataclass(frozen=True)
class RequiredElementRule(ValidationRule):
    """Report a missing element reached by a path of local names from <ead>."""

    element_name: str
    path: Tuple[str, ...]
    rule_id: str = "required-element"

    def evaluate(self, context: ValidationContext) -> Optional[RuleViolation]:
        if find_path(context.root, *self.path) is not None:
            return None
        return RuleViolation(self.rule_id, messages.missing_required_element(self.element_name))


def is_valid_eadid(value: str) -> bool:
    return bool(EADID_PATTERN.fullmatch(value)) and len(value.encode("utf-8")) <= MAX_EADID_BYTES


@dataclass(frozen=True)
class EADIDRule(ValidationRule):
    """<eadid>: lower-case alphanumeric groups joined by single underscores.

    Surrounding whitespace is ignored.
    """

    rule_id: str = "eadid-format"

    def evaluate(self, context: ValidationContext) -> Optional[RuleViolation]:
        el = find_path(context.root, "eadheader", "eadid")
        if el is None:
            return None
        value = text_content(el).strip()
        if is_valid_eadid(value):
            return None

        invalid: List[str] = []
        for ch in value:
            if ch not in _EADID_ALLOWED and ch not in invalid:
                invalid.append(ch)
        return RuleViolation(self.rule_id, messages.invalid_eadid(value, invalid))


@dataclass(frozen=True)
class RepositoryRule(ValidationRule):
    repositories: FrozenSet[str] = DEFAULT_REPOSITORIES
    rule_id: str = "repository"

    def evaluate(self, context: ValidationContext) -> Optional[RuleViolation]:
        el = find_path(context.root, "archdesc", "did", "repository", "corpname")
        if el is None:
            return None
        name = cleanup_whitespace(text_content(el))
        if name in self.repositories:
            return None
        return RuleViolation(self.rule_id, messages.invalid_repository(name))


@dataclass(frozen=True)
class ArchdescLevelRule(ValidationRule):
    required_level: str = DEFAULT_ARCHDESC_LEVEL
    rule_id: str = "archdesc-level"

    def evaluate(self, context: ValidationContext) -> Optional[RuleViolation]:
        archdesc = first_child(context.root, "archdesc")
        if archdesc is None:
            return None
        level = (archdesc.get("level") or "").strip()
        if level == self.required_level:
            return None
        return RuleViolation(self.rule_id, messages.invalid_archdesc_level(level, self.required_level))


@dataclass(frozen=True)
class AudienceInternalRule(ValidationRule):
    """No element may be marked audience="internal"."""

    rule_id: str = "audience-internal"

    def evaluate(self, context: ValidationContext) -> Optional[RuleViolation]:
        offenders = [f"<{local_name(e.tag)}>" for e in context.root.iter() if e.get("audience") == "internal"]
        if not offenders:
            return None
        return RuleViolation(self.rule_id, messages.audience_internal(offenders))


def is_absolute_uri(value: str) -> bool:
    """Syntactic check: scheme, then a non-empty hierarchical or opaque part."""

    if not value or value != value.strip() or any(c.isspace() for c in value):
        return False
    try:
        parts = urlsplit(value)
    except ValueError:
        return False
    if not parts.scheme or not _URI_SCHEME.fullmatch(parts.scheme):
        return False
    return bool(parts.netloc or parts.path)


@dataclass(frozen=True)
class DAOHrefRule(ValidationRule):
    rule_id: str = "dao-href"

    def evaluate(self, context: ValidationContext) -> Optional[RuleViolation]:
        offenders: List[Tuple[str, str]] = []
        for dao in iter_local(context.root, "dao"):
            href = attr(dao, "href") or ""
            if not is_absolute_uri(href):
                offenders.append((attr(dao, "title") or "", href))
        if not offenders:
            return None
        return RuleViolation(self.rule_id, messages.invalid_dao_hrefs(offenders))


RELATOR_CONTEXTS = ("controlaccess", "origination", "repository")
RELATOR_NAME_ELEMENTS = ("corpname", "famname", "persname")


@dataclass(frozen=True)
class RelatorCodeRule(ValidationRule):
    """Every role on a name under a relator context must be a MARC relator code.

    Names without a role are not checked. Offenders are reported grouped by
    context, then by name element.
    """

    rule_id: str = "relator-code"

    def evaluate(self, context: ValidationContext) -> Optional[RuleViolation]:
        offenders: List[Tuple[str, str]] = []
        for ctx_name in RELATOR_CONTEXTS:
            holders = list(iter_local(context.root, ctx_name))
            for name in RELATOR_NAME_ELEMENTS:
                for holder in holders:
                    for el in children(holder, name):
                        role = el.get("role")
                        if role is None or not role.strip() or is_relator_code(role):
                            continue
                        text = cleanup_whitespace(text_content(el))
                        offenders.append((f"<{ctx_name}><{name}>{text}</{name}></{ctx_name}>", role.strip()))
        if not offenders:
            return None
        return RuleViolation(self.rule_id, messages.unrecognized_relator_codes(offenders))
