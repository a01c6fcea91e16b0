from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import List, Optional, Protocol, Union, runtime_checkable

from defusedxml import DefusedXmlException
from defusedxml import ElementTree as DefusedET

from eadkit.core.document import parse_document

from . import messages
from .profile import ValidationProfile
from .rules import (
    ArchdescLevelRule,
    AudienceInternalRule,
    DAOHrefRule,
    EADIDRule,
    RelatorCodeRule,
    RepositoryRule,
    RequiredElementRule,
    RuleViolation,
    ValidationContext,
    ValidationRule,
)

log = logging.getLogger("eadkit.validation")


@runtime_checkable
class SchemaValidator(Protocol):
    """Structural (XSD) validation supplied by the caller.

    Returns one message per schema error; an empty list means valid.
    """

    def validate(self, root: ET.Element) -> List[str]:
        ...


@dataclass(frozen=True)
class RuleValidator:
    """
    Evaluates ValidationRule objects in order and collects every violation.

    Invariants
    - Deterministic: output order follows rule order
    - Fail closed: a rule that raises is reported as a violation
    - Type checks all rules at construction time
    """

    rules: List[ValidationRule] = field(default_factory=list)

    def __post_init__(self) -> None:
        for r in self.rules:
            if not isinstance(r, ValidationRule):
                raise TypeError("All rules must be ValidationRule instances")

    def validate(self, context: ValidationContext) -> List[RuleViolation]:
        if not isinstance(context, ValidationContext):
            raise TypeError("context must be a ValidationContext instance")

        violations: List[RuleViolation] = []
        for rule in self.rules:
            try:
                violation = rule.evaluate(context)
            except Exception as e:
                log.warning("rule_failed", extra={"rule_id": rule.rule_id, "error": e.__class__.__name__})
                violation = RuleViolation(rule.rule_id, messages.rule_failed(rule.rule_id, e))
            if violation is not None:
                violations.append(violation)
        return violations


def default_rules(profile: Optional[ValidationProfile] = None) -> List[ValidationRule]:
    prof = profile or ValidationProfile()
    return [
        RequiredElementRule(element_name="<eadid>", path=("eadheader", "eadid")),
        RequiredElementRule(element_name="<archdesc>", path=("archdesc",)),
        RequiredElementRule(
            element_name="<repository><corpname>",
            path=("archdesc", "did", "repository", "corpname"),
        ),
        EADIDRule(),
        RepositoryRule(repositories=prof.repositories),
        ArchdescLevelRule(required_level=prof.archdesc_level),
        AudienceInternalRule(),
        DAOHrefRule(),
        RelatorCodeRule(),
    ]


def validate_ead(
    data: Union[bytes, str],
    *,
    schema_validator: Optional[SchemaValidator] = None,
    profile: Optional[ValidationProfile] = None,
    source_file: Optional[str] = None,
) -> List[str]:
    """Validate a serialized EAD and return operator-facing diagnostics.

    - Unparsable input: the invalid-XML message, "Unable to parse XML file"
      and the parser's message.
    - Schema errors (when a schema_validator is given): the invalid-XML
      message, "schema validation failed" and each schema message. Business
      rules are not run on a schema-invalid document.
    - Otherwise: one message per violated business rule, in rule order.

    An empty list means the document passed.

    """

    try:
        root = parse_document(data)
    except (DefusedET.ParseError, DefusedXmlException) as e:
        log.info("validation_parse_failed", extra={"source_file": source_file})
        return [messages.INVALID_XML, messages.UNABLE_TO_PARSE, str(e)]

    if schema_validator is not None:
        schema_errors = list(schema_validator.validate(root))
        if schema_errors:
            log.info("validation_schema_failed", extra={"source_file": source_file, "errors": len(schema_errors)})
            return [messages.INVALID_XML, messages.SCHEMA_VALIDATION_FAILED, *schema_errors]

    context = ValidationContext(root=root, metadata={"source_file": source_file or ""})
    violations = RuleValidator(rules=default_rules(profile)).validate(context)
    log.info("validation_done", extra={"source_file": source_file, "violations": len(violations)})
    return [v.message for v in violations]
