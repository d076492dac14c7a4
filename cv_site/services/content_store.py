"""Service for fetching, parsing and caching YAML content documents."""

import asyncio
import logging
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Union

import httpx
import yaml
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel

from cv_site.models.request_models import Language, SUPPORTED_LANGUAGES
from cv_site.settings import LoadingStrategy, SiteSettings

logger = logging.getLogger(__name__)


class DocumentName(str, Enum):
    """Named content units."""

    PERSONAL = "personal"
    CAREER = "career"
    EDUCATION = "education"
    SKILLS = "skills"
    PROJECTS = "projects"
    UI_TEXT = "ui_text"


class DocumentScope(str, Enum):
    """How a parsed document relates to languages."""

    SCOPED = "scoped"
    KEYED = "keyed"
    SHARED = "shared"


class ContentError(Exception):
    """Base error for content that could not be loaded."""


class FetchFailure(ContentError):
    """Network failure or non-2xx response."""


class ParseFailure(ContentError):
    """Malformed YAML or unexpected document shape."""


_PER_LANGUAGE_STEMS = {
    DocumentName.PERSONAL: "personal_info",
    DocumentName.CAREER: "career",
    DocumentName.EDUCATION: "academic",
    DocumentName.SKILLS: "skills",
    DocumentName.PROJECTS: "projects",
    DocumentName.UI_TEXT: "ui_text",
}

_LANGUAGE_KEYED_STEMS = {
    DocumentName.PERSONAL: "personal",
    DocumentName.CAREER: "career",
    DocumentName.EDUCATION: "education",
    DocumentName.SKILLS: "skills",
    DocumentName.PROJECTS: "projects",
    DocumentName.UI_TEXT: "translations",
}

_SHARED_DOCUMENTS = frozenset({DocumentName.PERSONAL})


class Document(BaseModel):
    """A parsed content document."""

    name: DocumentName
    scope: DocumentScope
    data: Any = None
    language: Optional[Language] = None

    class Config:
        frozen = True

    def section(self, language: Union[Language, str]) -> Any:
        """
        Return the content for one language.

        Language-keyed documents are indexed by the language code; scoped and
        shared documents are returned as they are.
        """
        if self.scope is DocumentScope.KEYED:
            if not isinstance(self.data, dict):
                return None
            return self.data.get(Language(language).value)
        return self.data


class ContentStore:
    """Fetch YAML documents over HTTP and keep them in an in-memory cache."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        strategy: LoadingStrategy = LoadingStrategy.PER_LANGUAGE_FILES
    ):
        """
        Initialize the content store.

        Args:
            client: HTTP client whose base URL points at the content root
            strategy: Document layout; one strategy per store, never mixed
        """
        self.client = client
        self.strategy = strategy
        self._cache: Dict[str, Document] = {}

    def is_language_scoped(self, name: Union[DocumentName, str]) -> bool:
        """Whether a document must be fetched again when the language changes."""
        if self.strategy is LoadingStrategy.LANGUAGE_KEYED:
            return False
        return DocumentName(name) not in _SHARED_DOCUMENTS

    def scope_of(self, name: Union[DocumentName, str]) -> DocumentScope:
        if self.strategy is LoadingStrategy.LANGUAGE_KEYED:
            return DocumentScope.KEYED
        if DocumentName(name) in _SHARED_DOCUMENTS:
            return DocumentScope.SHARED
        return DocumentScope.SCOPED

    def cache_key(
        self,
        name: Union[DocumentName, str],
        language: Optional[Union[Language, str]] = None
    ) -> str:
        name = DocumentName(name)
        if self.is_language_scoped(name):
            return f"{name.value}:{self._require_language(name, language).value}"
        return name.value

    def document_path(
        self,
        name: Union[DocumentName, str],
        language: Optional[Union[Language, str]] = None
    ) -> str:
        """
        Build the request path for a document.

        Raises:
            ValueError: If a language-scoped document is requested without a language
        """
        name = DocumentName(name)
        if self.strategy is LoadingStrategy.LANGUAGE_KEYED:
            return f"/{_LANGUAGE_KEYED_STEMS[name]}.yml"
        stem = _PER_LANGUAGE_STEMS[name]
        if self.is_language_scoped(name):
            return f"/{stem}_{self._require_language(name, language).value}.yaml"
        return f"/{stem}.yaml"

    async def fetch(
        self,
        name: Union[DocumentName, str],
        language: Optional[Union[Language, str]] = None
    ) -> Optional[Document]:
        """
        Fetch a document, serving repeated requests from the cache.

        Args:
            name: Document name
            language: Language code; required for language-scoped documents

        Returns:
            Document, or None when the section is unavailable
        """
        try:
            name = DocumentName(name)
            lang = Language(language) if language is not None else None
            key = self.cache_key(name, lang)
        except ValueError as e:
            logger.warning("Cannot fetch document %r: %s", name, e)
            return None

        cached = self._cache.get(key)
        if cached is not None:
            logger.debug("Cache hit for %s", key)
            return cached

        try:
            document = await self._load(name, lang)
        except ContentError as e:
            logger.warning("Section %s unavailable: %s", key, e)
            return None

        self._cache[key] = document
        return document

    async def fetch_all(
        self,
        names: Iterable[Union[DocumentName, str]],
        language: Optional[Union[Language, str]] = None
    ) -> Dict[DocumentName, Optional[Document]]:
        """
        Fetch several documents concurrently.

        Each result is independently nullable; one failure never blocks the others.
        """
        names = [DocumentName(name) for name in names]
        results = await asyncio.gather(*(self.fetch(name, language) for name in names))
        return dict(zip(names, results))

    def clear_cache(
        self,
        name: Optional[Union[DocumentName, str]] = None,
        language: Optional[Union[Language, str]] = None
    ) -> None:
        """Drop one cache entry, or every entry when no name is given."""
        if name is None:
            self._cache.clear()
            return
        self._cache.pop(self.cache_key(name, language), None)

    def cached_keys(self) -> list:
        return sorted(self._cache)

    async def _load(self, name: DocumentName, language: Optional[Language]) -> Document:
        path = self.document_path(name, language)

        try:
            response = await self.client.get(path)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise FetchFailure(f"Failed to load {path}: {e}") from e

        try:
            data = yaml.safe_load(response.content)
        except yaml.YAMLError as e:
            raise ParseFailure(f"Invalid YAML format in {path}: {e}") from e

        if not isinstance(data, dict):
            raise ParseFailure(
                f"Expected a mapping at the root of {path}, got {type(data).__name__}"
            )

        scope = self.scope_of(name)
        if scope is DocumentScope.KEYED and not any(code in data for code in SUPPORTED_LANGUAGES):
            raise ParseFailure(f"{path} is not keyed by language code")

        return Document(
            name=name,
            scope=scope,
            data=data,
            language=language if scope is DocumentScope.SCOPED else None,
        )

    def _require_language(
        self,
        name: DocumentName,
        language: Optional[Union[Language, str]]
    ) -> Language:
        if language is None:
            raise ValueError(f"Document '{name.value}' requires a language")
        return Language(language)


def build_content_client(settings: SiteSettings) -> httpx.AsyncClient:
    """
    Create the HTTP client used by the content store.

    Documents are fetched from ``content_base_url`` when it is configured,
    otherwise they are served in-process from ``data_dir``.
    """
    if settings.content_base_url:
        return httpx.AsyncClient(
            base_url=settings.content_base_url.rstrip("/"),
            timeout=settings.request_timeout
        )
    content_app = FastAPI(openapi_url=None)
    content_app.mount("/", StaticFiles(directory=str(settings.data_dir)), name="content")
    return httpx.AsyncClient(
        transport=httpx.ASGITransport(app=content_app),
        base_url="http://content",
        timeout=settings.request_timeout
    )
