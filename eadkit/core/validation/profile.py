from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, FrozenSet

from eadkit.core.errors import ProfileError

DEFAULT_REPOSITORIES: FrozenSet[str] = frozenset(
    {
        "Fales Library and Special Collections",
        "New York University Archives",
        "Tamiment Library and Robert F. Wagner Labor Archives",
        "Poly Archives at Bern Dibner Library of Science and Technology",
        "New-York Historical Society",
        "Center for Brooklyn History",
        "NYU Abu Dhabi Archives and Special Collections",
        "Villa La Pietra",
    }
)
DEFAULT_ARCHDESC_LEVEL = "collection"


@dataclass(frozen=True, slots=True)
class ValidationProfile:
    """Institution-specific values used by the business rules.

    Supported schema (JSON)

    {
      "repositories": ["Fales Library and Special Collections", ...],
      "archdesc_level": "collection"
    }

    Both keys are optional; missing keys keep the defaults.

    Security notes:
    - Treat profile files as trusted configuration.
    """

    profile_id: str = "default"
    repositories: FrozenSet[str] = DEFAULT_REPOSITORIES
    archdesc_level: str = DEFAULT_ARCHDESC_LEVEL


def _parse_json(text: str) -> Dict[str, Any]:
    try:
        obj = json.loads(text)
    except json.JSONDecodeError as e:
        raise ProfileError(f"validation profile is not valid JSON: {e}") from e
    if not isinstance(obj, dict):
        raise ProfileError("validation profile JSON must be an object")
    return obj


def load_validation_profile(path: str) -> ValidationProfile:
    """Load a validation profile from a JSON file.

    Raises ProfileError for unreadable files or invalid contents.

    Time:  O(n)
    Space: O(n)
    """

    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as e:
        raise ProfileError(f"cannot read validation profile {path}: {e}") from e

    data = _parse_json(text)

    repos = data.get("repositories", None)
    if repos is None:
        repositories = DEFAULT_REPOSITORIES
    elif isinstance(repos, list) and repos and all(isinstance(x, str) and x.strip() for x in repos):
        repositories = frozenset(x.strip() for x in repos)
    else:
        raise ProfileError("repositories must be a non-empty list of strings")

    level = data.get("archdesc_level", DEFAULT_ARCHDESC_LEVEL)
    if not isinstance(level, str) or not level.strip():
        raise ProfileError("archdesc_level must be a non-empty string")

    return ValidationProfile(profile_id=p.stem, repositories=repositories, archdesc_level=level.strip())
