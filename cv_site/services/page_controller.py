"""Orchestrates loading, rendering and language switching for the CV page."""

import asyncio
import logging
from typing import Dict, Iterable, Optional, Tuple

from bs4 import BeautifulSoup, Tag

from cv_site.models.request_models import SUPPORTED_LANGUAGES
from cv_site.services.carousel import CarouselController
from cv_site.services.content_store import ContentStore, Document, DocumentName
from cv_site.services.language_preference import LanguageContext, LanguagePreference
from cv_site.services.renderer import (
    CAREER_SLUG_FIELDS,
    EDUCATION_SLUG_FIELDS,
    SectionRenderer,
    career_entries,
    education_entries,
)
from cv_site.utils.template_helpers import find_entry

logger = logging.getLogger(__name__)

ALL_DOCUMENTS = tuple(DocumentName)
CRITICAL_DOCUMENTS = (
    DocumentName.PERSONAL,
    DocumentName.CAREER,
    DocumentName.EDUCATION,
    DocumentName.SKILLS,
)
CAROUSEL_CONTAINERS = ("career-carousel", "education-carousel")


class PageController:
    """
    Sequence the content store, language preference, renderer and carousels.

    On load: resolve language, fetch every document concurrently, render all
    sections into a fresh page shell and attach the carousels. On a language
    change: re-fetch only the language-scoped documents and re-render every
    section; carousels start over at the first slide.

    Every load and refresh takes a new generation number. Results of a
    generation that is no longer current are discarded, so a late response
    for a previous language never overwrites the page for a newer one.
    """

    def __init__(
        self,
        store: ContentStore,
        preference: LanguagePreference,
        renderer: SectionRenderer
    ):
        self.store = store
        self.preference = preference
        self.renderer = renderer
        self.documents: Dict[DocumentName, Optional[Document]] = {}
        self.context: Optional[LanguageContext] = None
        self.soup: Optional[BeautifulSoup] = None
        self.carousels: Dict[str, CarouselController] = {
            container_id: CarouselController() for container_id in CAROUSEL_CONTAINERS
        }
        self.generation = 0
        self._initialized = False
        self._refresh_task: Optional[asyncio.Task] = None

    def initialize(self) -> None:
        """Subscribe to language changes once, however often this is called."""
        if self._initialized:
            return
        self.preference.on_change(self._on_language_change)
        self._initialized = True

    async def load(self, browser_locale: Optional[str] = None) -> str:
        """
        Build the full page.

        Args:
            browser_locale: Browser locale or Accept-Language header value

        Returns:
            str: Rendered HTML
        """
        self.initialize()
        language = self.preference.resolve(browser_locale)
        generation = self._next_generation()

        documents = await self.store.fetch_all(ALL_DOCUMENTS, language)
        if generation != self.generation:
            logger.debug("Discarding superseded load %d", generation)
            return self.html()

        self.documents = documents
        self.render_all(LanguageContext(language=language))
        return self.html()

    async def refresh(self, context: Optional[LanguageContext] = None) -> bool:
        """Re-fetch language-scoped documents and re-render for the active language."""
        context = context or self.preference.context()
        return await self._refresh(context, self._next_generation())

    async def switch_language(self, code) -> bool:
        """
        Change the language and wait for the page to be re-rendered.

        Returns:
            bool: False when the language is not supported
        """
        self.initialize()
        if not self.preference.set(code):
            return False
        task = self._refresh_task
        if task is not None:
            await task
        return True

    def render_all(self, context: LanguageContext) -> None:
        """Render every section into a fresh page shell."""
        self.context = context
        documents = self.documents
        ui = self.renderer.ui_text(documents.get(DocumentName.UI_TEXT), context)

        self.soup = BeautifulSoup(
            self.renderer.render_fragment(
                "page.html", language=context.code, languages=SUPPORTED_LANGUAGES, ui=ui
            ),
            "html.parser"
        )

        personal = documents.get(DocumentName.PERSONAL)
        career = documents.get(DocumentName.CAREER)
        sections = (
            ("profile", self.renderer.render_personal, personal),
            ("career-carousel", self.renderer.render_career, career),
            ("education-carousel", self.renderer.render_education, documents.get(DocumentName.EDUCATION)),
            ("career-timeline", self.renderer.render_timeline, career),
            ("skills-section", self.renderer.render_skills, documents.get(DocumentName.SKILLS)),
            ("projects-grid", self.renderer.render_projects, documents.get(DocumentName.PROJECTS)),
            ("contact-info", self.renderer.render_contact, personal),
        )
        for container_id, render, document in sections:
            container = self._container(container_id)
            if container is not None:
                render(container, document, context, ui)

        banner = self._container("banner")
        if banner is not None:
            self.renderer.render_banner(banner, ui, show=self.all_critical_failed())

        for container_id, carousel in self.carousels.items():
            container = self._container(container_id)
            if container is not None:
                carousel.attach(container)

    def all_critical_failed(self) -> bool:
        return all(self.documents.get(name) is None for name in CRITICAL_DOCUMENTS)

    def html(self) -> str:
        return str(self.soup) if self.soup is not None else ""

    async def render_detail(self, kind: str, key: str) -> Tuple[str, bool]:
        """
        Render a career or academic detail page.

        Args:
            kind: "career" or "academic"
            key: Explicit entry id or slug

        Returns:
            Tuple of (html, found)
        """
        context = self.preference.context()
        name = DocumentName.CAREER if kind == "career" else DocumentName.EDUCATION
        documents = await self.store.fetch_all((name, DocumentName.UI_TEXT), context.language)
        ui = self.renderer.ui_text(documents[DocumentName.UI_TEXT], context)

        if name is DocumentName.CAREER:
            entry = find_entry(career_entries(documents[name], context) or [], key, CAREER_SLUG_FIELDS)
            title = ui["career_details_title"]
            render = self.renderer.render_career_detail
        else:
            entry = find_entry(education_entries(documents[name], context) or [], key, EDUCATION_SLUG_FIELDS)
            title = ui["academic_details_title"]
            render = self.renderer.render_education_detail

        soup = self._shell("detail.html", context, ui, title)
        render(soup.find(id="detail"), entry, context, ui)
        return str(soup), entry is not None

    async def render_timeline_page(self) -> str:
        context = self.preference.context()
        documents = await self.store.fetch_all(
            (DocumentName.CAREER, DocumentName.UI_TEXT), context.language
        )
        ui = self.renderer.ui_text(documents[DocumentName.UI_TEXT], context)
        soup = self._shell("detail.html", context, ui, ui["timeline_page_title"])
        self.renderer.render_timeline(soup.find(id="detail"), documents[DocumentName.CAREER], context, ui)
        return str(soup)

    def _shell(self, template_name: str, context: LanguageContext, ui, title: str) -> BeautifulSoup:
        return BeautifulSoup(
            self.renderer.render_fragment(
                template_name, language=context.code, ui=ui, title=title
            ),
            "html.parser"
        )

    def _on_language_change(self, context: LanguageContext) -> None:
        generation = self._next_generation()
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; refresh for %s deferred", context.code)
            return
        self._refresh_task = asyncio.ensure_future(self._refresh(context, generation))

    async def _refresh(self, context: LanguageContext, generation: int) -> bool:
        names = self._names_to_refetch(ALL_DOCUMENTS)
        logger.debug("Refresh %d for %s: fetching %s", generation, context.code, names)
        fetched = await self.store.fetch_all(names, context.language)
        if generation != self.generation:
            logger.debug("Discarding stale refresh %d (current %d)", generation, self.generation)
            return False

        documents = dict(self.documents)
        documents.update(fetched)
        self.documents = documents
        self.render_all(context)
        return True

    def _names_to_refetch(self, names: Iterable[DocumentName]):
        return [
            name for name in names
            if self.store.is_language_scoped(name) or name not in self.documents
        ]

    def _next_generation(self) -> int:
        self.generation += 1
        return self.generation

    def _container(self, element_id: str) -> Optional[Tag]:
        container = self.soup.find(id=element_id) if self.soup is not None else None
        if container is None:
            logger.warning("Page shell has no element with id %r", element_id)
        return container
