"""Business-rule validation for EAD finding aids.

Rules follow a small pattern: each ValidationRule inspects a
ValidationContext and returns at most one RuleViolation; RuleValidator runs
them in order. Structural XSD validation is left to an injected
SchemaValidator.
"""

from .profile import ValidationProfile, load_validation_profile
from .relators import RELATOR_LABELS, is_relator_code, relator_label
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
    is_absolute_uri,
    is_valid_eadid,
)
from .validator import RuleValidator, SchemaValidator, default_rules, validate_ead

__all__ = [
    "ValidationProfile",
    "load_validation_profile",
    "RELATOR_LABELS",
    "is_relator_code",
    "relator_label",
    "ValidationContext",
    "ValidationRule",
    "RuleViolation",
    "RequiredElementRule",
    "EADIDRule",
    "RepositoryRule",
    "ArchdescLevelRule",
    "AudienceInternalRule",
    "DAOHrefRule",
    "RelatorCodeRule",
    "is_absolute_uri",
    "is_valid_eadid",
    "RuleValidator",
    "SchemaValidator",
    "default_rules",
    "validate_ead",
]
