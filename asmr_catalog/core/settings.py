"""
User-facing catalog settings.

Settings are plain values; persistence belongs to whatever key/value store the
host already has. `create_settings_from_config` reads from any object exposing
`get_config(key, default)` with string values ("true"/"false", numbers as
text), the same convention the HTTP client factory uses.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Mapping

from asmr_catalog.core.http_client import DEFAULT_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)


SITE_MIRRORS = ("asmr-100", "asmr-200", "asmr-300")
DEFAULT_SITE_MIRROR = "asmr-200"
DEFAULT_TRANSLATION_LANGUAGE = "en"

# Codes accepted by the translation endpoint (source "auto" excluded).
TRANSLATION_LANGUAGES = frozenset({
    "af", "ar", "bg", "bn", "ca", "cs", "da", "de", "el", "en", "es", "et",
    "fa", "fi", "fr", "gu", "he", "hi", "hr", "hu", "id", "it", "ja", "kn",
    "ko", "lt", "lv", "ml", "mr", "ms", "nl", "no", "pa", "pl", "pt", "ro",
    "ru", "sk", "sl", "sr", "sv", "sw", "ta", "te", "th", "tl", "tr", "uk",
    "ur", "vi", "zh-CN", "zh-TW",
})


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("true", "1", "yes", "on")


@dataclass
class CatalogSettings:
    translation_language: str = DEFAULT_TRANSLATION_LANGUAGE
    only_show_subtitled: bool = False
    only_show_sfw: bool = False
    site_mirror: str = DEFAULT_SITE_MIRROR
    request_timeout: int = DEFAULT_TIMEOUT_SECONDS
    show_tags: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.translation_language not in TRANSLATION_LANGUAGES:
            logger.warning(
                f"Unknown translation language {self.translation_language!r}, "
                f"using {DEFAULT_TRANSLATION_LANGUAGE}"
            )
            self.translation_language = DEFAULT_TRANSLATION_LANGUAGE
        if self.site_mirror not in SITE_MIRRORS:
            logger.warning(f"Unknown site mirror {self.site_mirror!r}, using {DEFAULT_SITE_MIRROR}")
            self.site_mirror = DEFAULT_SITE_MIRROR
        if self.request_timeout <= 0:
            self.request_timeout = DEFAULT_TIMEOUT_SECONDS

    @property
    def subtitle_param(self) -> int:
        return 1 if self.only_show_subtitled else 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CatalogSettings":
        try:
            timeout = int(data.get("request_timeout", DEFAULT_TIMEOUT_SECONDS))
        except (TypeError, ValueError):
            timeout = DEFAULT_TIMEOUT_SECONDS

        show_tags = data.get("show_tags") or []
        if isinstance(show_tags, str):
            show_tags = [t.strip() for t in show_tags.split(",") if t.strip()]

        return cls(
            translation_language=str(data.get("translation_language") or DEFAULT_TRANSLATION_LANGUAGE),
            only_show_subtitled=_as_bool(data.get("only_show_subtitled", False)),
            only_show_sfw=_as_bool(data.get("only_show_sfw", False)),
            site_mirror=str(data.get("site_mirror") or DEFAULT_SITE_MIRROR),
            request_timeout=timeout,
            show_tags=list(show_tags),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def create_settings_from_config(config_store) -> CatalogSettings:
    """
    Build CatalogSettings from a key/value config store.

    Args:
        config_store: object with get_config(key, default)
    """
    data = {
        "translation_language": config_store.get_config("translation_language", DEFAULT_TRANSLATION_LANGUAGE),
        "only_show_subtitled": config_store.get_config("only_show_subtitled", "false"),
        "only_show_sfw": config_store.get_config("only_show_sfw", "false"),
        "site_mirror": config_store.get_config("site_mirror", DEFAULT_SITE_MIRROR),
        "request_timeout": config_store.get_config("request_timeout", str(DEFAULT_TIMEOUT_SECONDS)),
        "show_tags": config_store.get_config("show_tags", ""),
    }
    settings = CatalogSettings.from_dict(data)
    logger.debug(f"Loaded settings: {settings.to_dict()}")
    return settings
