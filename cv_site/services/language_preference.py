"""Service to resolve, persist and broadcast the active language."""

import json
import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union
from pydantic import BaseModel

from cv_site.models.request_models import DEFAULT_LANGUAGE, Language, SUPPORTED_LANGUAGES

logger = logging.getLogger(__name__)

STORAGE_KEY = "preferred_language"


class LanguageContext(BaseModel):
    """Immutable snapshot of the active language handed to renderers."""

    language: Language

    class Config:
        frozen = True

    @property
    def code(self) -> str:
        return self.language.value


LanguageListener = Callable[[LanguageContext], None]


class MemoryPreferenceStorage:
    """Key-value preference storage kept in memory."""

    def __init__(self, values: Optional[Dict[str, str]] = None):
        self._values: Dict[str, str] = dict(values or {})

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value


class JsonFilePreferenceStorage:
    """Key-value preference storage persisted as one JSON object on disk."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def get(self, key: str) -> Optional[str]:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        values = self._read()
        values[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(values, f)

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                values = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable preference file %s: %s", self.path, e)
            return {}
        return values if isinstance(values, dict) else {}


def browser_language(locale: Optional[str]) -> Optional[Language]:
    """
    Extract the supported primary language of a browser locale.

    Accepts a single tag ("de-CH") or an Accept-Language header
    ("fr-FR,fr;q=0.9,en;q=0.8"); only the most preferred entry is considered.

    Returns:
        Language, or None if the preferred locale is unsupported
    """
    if not locale:
        return None

    best_tag = None
    best_quality = -1.0
    for part in locale.split(","):
        tag, _, params = part.strip().partition(";")
        if not tag:
            continue
        quality = 1.0
        params = params.strip()
        if params.startswith("q="):
            try:
                quality = float(params[2:])
            except ValueError:
                quality = 0.0
        if quality > best_quality:
            best_tag, best_quality = tag, quality

    if best_tag is None:
        return None
    primary = best_tag.split("-")[0].split("_")[0].lower()
    return Language(primary) if primary in SUPPORTED_LANGUAGES else None


class LanguagePreference:
    """Resolve and persist the preferred language and notify listeners of changes."""

    def __init__(
        self,
        storage=None,
        default: Union[Language, str] = DEFAULT_LANGUAGE
    ):
        """
        Initialize the language preference.

        Args:
            storage: Object with ``get(key)``/``set(key, value)``; in-memory if None
            default: Language used when neither storage nor browser locale help
        """
        self.storage = storage if storage is not None else MemoryPreferenceStorage()
        self.default = Language(default)
        self._current: Optional[Language] = None
        self._listeners: List[LanguageListener] = []

    @property
    def current(self) -> Language:
        if self._current is None:
            return self.resolve()
        return self._current

    def resolve(self, browser_locale: Optional[str] = None) -> Language:
        """
        Resolve the active language: stored value, then browser locale, then default.

        A value found in the browser locale or the default is written back to
        storage.
        """
        stored = self.storage.get(STORAGE_KEY)
        if stored in SUPPORTED_LANGUAGES:
            self._current = Language(stored)
            return self._current

        language = browser_language(browser_locale) or self.default
        self.storage.set(STORAGE_KEY, language.value)
        self._current = language
        return language

    def set(self, code: Union[Language, str]) -> bool:
        """
        Switch the active language.

        Returns:
            bool: False for unsupported codes (nothing changes). Re-selecting
            the active language returns True without notifying listeners.
        """
        try:
            language = Language(code)
        except ValueError:
            logger.warning("Rejected unsupported language %r", code)
            return False

        if language == self._current:
            return True

        self.storage.set(STORAGE_KEY, language.value)
        self._current = language
        context = self.context()
        for listener in list(self._listeners):
            listener(context)
        return True

    def on_change(self, listener: LanguageListener) -> None:
        """Register a listener; registering the same listener again is ignored."""
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: LanguageListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def context(self) -> LanguageContext:
        return LanguageContext(language=self.current)
