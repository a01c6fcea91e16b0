from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import FrozenSet, Optional

DEFAULT_PROTECTED_LEVELS: FrozenSet[str] = frozenset(
    {"series", "subseries", "otherlevel", "recordgrp", "subgrp"}
)
DEFAULT_WRAPPER_LEVEL = "dl-presentation"
DEFAULT_WRAPPER_TITLE = "Inventory"
DEFAULT_WRAPPER_ID_PREFIX = "items"
DEFAULT_WRAPPER_ID_WIDTH = 3
DEFAULT_INTERNAL_UNITID_TYPE = "aspace_uri"


@dataclass(frozen=True, slots=True)
class ProcessingConfig:
    """Configuration shared by the grouping and export transforms.

    The synthetic wrapper level is always protected, even when the caller
    supplies its own protected set. Level names are compared lower-cased.

    """

    protected_levels: FrozenSet[str] = DEFAULT_PROTECTED_LEVELS
    wrapper_level: str = DEFAULT_WRAPPER_LEVEL
    wrapper_title: str = DEFAULT_WRAPPER_TITLE
    wrapper_id_prefix: str = DEFAULT_WRAPPER_ID_PREFIX
    wrapper_id_width: int = DEFAULT_WRAPPER_ID_WIDTH
    internal_unitid_type: str = DEFAULT_INTERNAL_UNITID_TYPE
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        object.__setattr__(self, "wrapper_level", self.wrapper_level.strip().lower())
        object.__setattr__(
            self,
            "protected_levels",
            frozenset(x.strip().lower() for x in self.protected_levels if x.strip()),
        )

    def is_protected(self, level: Optional[str]) -> bool:
        lv = (level or "").strip().lower()
        return lv in self.protected_levels or lv == self.wrapper_level

    @staticmethod
    def from_env() -> "ProcessingConfig":
        """Create a config from environment variables.

        - EADKIT_PROTECTED_LEVELS (comma separated)
        - EADKIT_WRAPPER_LEVEL / EADKIT_WRAPPER_TITLE / EADKIT_WRAPPER_ID_PREFIX
        - EADKIT_WRAPPER_ID_WIDTH (default 3, minimum 1)
        - EADKIT_INTERNAL_UNITID_TYPE
        - EADKIT_LOG_LEVEL (default WARNING)

        Unparsable values fall back to defaults.

        """

        return ProcessingConfig(
            protected_levels=_env_set("EADKIT_PROTECTED_LEVELS", DEFAULT_PROTECTED_LEVELS),
            wrapper_level=_env_str("EADKIT_WRAPPER_LEVEL", DEFAULT_WRAPPER_LEVEL),
            wrapper_title=_env_str("EADKIT_WRAPPER_TITLE", DEFAULT_WRAPPER_TITLE),
            wrapper_id_prefix=_env_str("EADKIT_WRAPPER_ID_PREFIX", DEFAULT_WRAPPER_ID_PREFIX),
            wrapper_id_width=max(1, _env_int("EADKIT_WRAPPER_ID_WIDTH", DEFAULT_WRAPPER_ID_WIDTH)),
            internal_unitid_type=_env_str("EADKIT_INTERNAL_UNITID_TYPE", DEFAULT_INTERNAL_UNITID_TYPE),
            log_level=_env_str("EADKIT_LOG_LEVEL", "WARNING").upper(),
        )


def _env_str(name: str, default: str) -> str:
    raw = os.environ.get(name, "").strip()
    return raw or default


def _env_int(name: str, default: int) -> int:
    """Read an integer environment variable."""

    raw = os.environ.get(name, "").strip()
    if not raw:
        return int(default)
    try:
        return int(raw)
    except ValueError:
        return int(default)


def _env_set(name: str, default: FrozenSet[str]) -> FrozenSet[str]:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    items = {x.strip().lower() for x in raw.split(",") if x.strip()}
    return frozenset(items) if items else default


def configure_logging(level: Optional[str] = None) -> None:
    """Configure the "eadkit" logger hierarchy.

    Safe default: WARNING, messages to stderr. Host applications that
    configure logging themselves should not call this.

    """

    lv = (level or os.environ.get("EADKIT_LOG_LEVEL") or "WARNING").upper()
    logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s %(message)s")
    logging.getLogger("eadkit").setLevel(lv)
