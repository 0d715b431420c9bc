"""
Message localization for notifications.

Templates live in flat JSON bundles, one per language, under
notifications/locales/<language>.json. Keys follow the pattern:

    {kind}.title        - mandatory
    {kind}.body         - mandatory, generic body
    {kind}.body.self    - optional, recipient is the actor
    {kind}.body.actor   - optional, recipient is someone else

Bundle selection tries the exact language code, then its primary subtag
("pt-BR" -> "pt"), then NOTIFICATIONS_DEFAULT_LANGUAGE. Placeholders are
written as {paramName} and replaced literally; a placeholder with no value
stays in the output.

Usage:
    from notifications.localization import get_localizer

    message = get_localizer().localize(kind, context, "ru", is_self=False)
    message.title, message.body
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from django.conf import settings

from notifications.context import NotificationContext, build_params
from notifications.exceptions import TemplateConfigurationError
from notifications.models import NotificationKind

logger = logging.getLogger(__name__)

LOCALES_DIR = Path(__file__).resolve().parent / "locales"

PLACEHOLDER_RE = re.compile(r"\{(\w+)\}")


@dataclass(frozen=True)
class LocalizedMessage:
    title: str
    body: str

    def as_text(self) -> str:
        """Single-string form stored on in-app notifications."""
        return f"{self.title}\n{self.body}"


def normalize_language(code: str | None) -> str:
    """Lowercase and use "-" as subtag separator ("en_US" -> "en-us")."""
    return (code or "").strip().lower().replace("_", "-")


def load_bundles(directory: Path = LOCALES_DIR) -> dict[str, dict[str, str]]:
    """Read every <language>.json bundle in directory."""
    bundles = {}
    for path in sorted(directory.glob("*.json")):
        with path.open(encoding="utf-8") as fh:
            try:
                bundle = json.load(fh)
            except json.JSONDecodeError as e:
                raise TemplateConfigurationError(f"Locale bundle {path.name} is not valid JSON: {e}") from e
        if not isinstance(bundle, dict):
            raise TemplateConfigurationError(f"Locale bundle {path.name} must be a JSON object")
        bundles[normalize_language(path.stem)] = bundle
    return bundles


def render(template: str, params: dict[str, str]) -> str:
    """Replace each {name} with params[name] in one pass; unknown names are kept."""
    return PLACEHOLDER_RE.sub(lambda match: params.get(match.group(1), match.group(0)), template)


class MessageLocalizer:
    """Resolves and renders notification templates for a language."""

    def __init__(
        self,
        bundles: dict[str, dict[str, str]],
        default_language: str = "en",
    ):
        self.bundles = {normalize_language(lang): b for lang, b in bundles.items()}
        self.default_language = normalize_language(default_language)

    def validate(self) -> None:
        """
        Check that the default bundle exists and every bundle defines the
        title and generic body for every kind.

        Raises:
            TemplateConfigurationError: On the first problem found
        """
        if self.default_language not in self.bundles:
            raise TemplateConfigurationError(
                f"Default notification language '{self.default_language}' has no locale bundle"
            )
        for language, bundle in self.bundles.items():
            missing = [
                key
                for kind in NotificationKind.values
                for key in (f"{kind}.title", f"{kind}.body")
                if key not in bundle
            ]
            if missing:
                raise TemplateConfigurationError(
                    f"Locale bundle '{language}' is missing keys: {', '.join(missing)}"
                )

    def bundle_for(self, language_code: str | None) -> dict[str, str]:
        code = normalize_language(language_code)
        if code in self.bundles:
            return self.bundles[code]
        primary = code.split("-", 1)[0]
        if primary in self.bundles:
            return self.bundles[primary]
        return self.bundles[self.default_language]

    def localize(
        self,
        kind: str,
        context: NotificationContext,
        language_code: str | None,
        is_self: bool,
    ) -> LocalizedMessage:
        bundle = self.bundle_for(language_code)
        params = build_params(kind, context)
        title = bundle[f"{kind}.title"]
        body = bundle[self.body_key(bundle, kind, is_self)]
        return LocalizedMessage(title=render(title, params), body=render(body, params))

    @staticmethod
    def body_key(bundle: dict[str, str], kind: str, is_self: bool) -> str:
        variant = f"{kind}.body.self" if is_self else f"{kind}.body.actor"
        if variant in bundle:
            return variant
        return f"{kind}.body"


@lru_cache(maxsize=1)
def get_localizer() -> MessageLocalizer:
    """Process-wide localizer built from the shipped bundles."""
    return MessageLocalizer(
        load_bundles(),
        default_language=getattr(settings, "NOTIFICATIONS_DEFAULT_LANGUAGE", "en"),
    )
