"""Service for rendering CV sections from content documents into page containers."""

import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Type, TypeVar

from bs4 import BeautifulSoup, Tag
from jinja2 import Environment, FileSystemLoader, select_autoescape
from pydantic import BaseModel, ValidationError

from cv_site.i18n import merge_ui_text
from cv_site.models.content_models import (
    CareerPosition,
    EducationEntry,
    PersonalInfo,
    ProjectEntry,
    SkillCategory,
    SkillItem,
)
from cv_site.services.content_store import Document
from cv_site.services.language_preference import LanguageContext
from cv_site.settings import SkillDisplay
from cv_site.utils.template_helpers import (
    MAX_STARS,
    NOT_AVAILABLE,
    entry_key,
    format_period,
    parse_entry_date,
    percentage,
    register_jinja_filters,
    sort_by_date_desc,
    star_count,
)

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

CAREER_SLUG_FIELDS = ("company", "position")
EDUCATION_SLUG_FIELDS = ("institution", "degree")
SKILL_CATEGORIES = ("hard", "soft", "it")

_CAREER_LIST_KEYS = ("career", "positions")
_EDUCATION_LIST_KEYS = ("academic", "institutions", "education")
_PROJECT_LIST_KEYS = ("projects",)


def parse_entries(model: Type[M], raw_entries: Any, label: str) -> List[M]:
    """Validate a list of raw YAML entries, skipping the ones that are not usable."""
    entries = []
    for index, raw in enumerate(raw_entries or []):
        if not isinstance(raw, dict):
            logger.warning("Skipping %s entry %d: expected a mapping", label, index)
            continue
        try:
            entries.append(model.model_validate(raw))
        except ValidationError as e:
            logger.warning("Skipping %s entry %d: %s", label, index, e)
    return entries


def section_list(section: Any, keys) -> Optional[list]:
    """Find the entry list of a section under one of its accepted keys."""
    if not isinstance(section, dict):
        return None
    for key in keys:
        value = section.get(key)
        if isinstance(value, list):
            return value
    return None


def career_entries(document: Optional[Document], context: LanguageContext) -> Optional[List[CareerPosition]]:
    """Career positions of a document, most recent first; None if unavailable."""
    if document is None:
        return None
    raw = section_list(document.section(context.language), _CAREER_LIST_KEYS)
    if raw is None:
        return None
    return sort_by_date_desc(
        parse_entries(CareerPosition, raw, "career"),
        lambda entry: parse_entry_date(entry.start_date, entry.duration)
    )


def education_entries(document: Optional[Document], context: LanguageContext) -> Optional[List[EducationEntry]]:
    """Education entries of a document, most recent first; None if unavailable."""
    if document is None:
        return None
    raw = section_list(document.section(context.language), _EDUCATION_LIST_KEYS)
    if raw is None:
        return None
    return sort_by_date_desc(
        parse_entries(EducationEntry, raw, "education"),
        lambda entry: parse_entry_date(entry.start_date, entry.time)
    )


class SectionRenderer:
    """Render CV sections with Jinja2 templates into BeautifulSoup containers."""

    def __init__(
        self,
        template_dir: Optional[Path] = None,
        skill_display: SkillDisplay = SkillDisplay.STARS
    ):
        """
        Initialize the section renderer.

        Args:
            template_dir: Directory containing Jinja2 templates. Defaults to cv_site/templates/
            skill_display: How skill levels are drawn
        """
        if template_dir is None:
            template_dir = Path(__file__).parent.parent / "templates"

        self.template_dir = template_dir
        self.skill_display = SkillDisplay(skill_display)
        self.env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            autoescape=select_autoescape(["html", "xml"])
        )
        register_jinja_filters(self.env)

    def render_fragment(self, template_name: str, **data: Any) -> str:
        template = self.env.get_template(template_name)
        return template.render(**data)

    def ui_text(self, document: Optional[Document], context: LanguageContext) -> Dict[str, str]:
        overrides = document.section(context.language) if document is not None else None
        return merge_ui_text(context.language, overrides)

    def render_placeholder(self, container: Tag, ui: Mapping[str, str]) -> None:
        self._replace(container, self.render_fragment(
            "sections/placeholder.html", message=ui["not_available"]
        ))

    def render_personal(
        self,
        container: Tag,
        document: Optional[Document],
        context: LanguageContext,
        ui: Optional[Mapping[str, str]] = None
    ) -> None:
        """Render name, title and summary."""
        ui = ui or merge_ui_text(context.language)
        personal = self._personal(document, context)
        if personal is None:
            self.render_placeholder(container, ui)
            return
        self._replace(container, self.render_fragment(
            "sections/personal.html", personal=personal, na=NOT_AVAILABLE
        ))

    def render_career(
        self,
        container: Tag,
        document: Optional[Document],
        context: LanguageContext,
        ui: Optional[Mapping[str, str]] = None
    ) -> None:
        """Render the career carousel, most recent position first."""
        ui = ui or merge_ui_text(context.language)
        entries = career_entries(document, context)
        if entries is None:
            self.render_placeholder(container, ui)
            return
        items = [self._career_view(entry, ui, position) for position, entry in enumerate(entries)]
        self._replace(container, self.render_fragment(
            "sections/career.html", items=items, ui=ui
        ))

    def render_education(
        self,
        container: Tag,
        document: Optional[Document],
        context: LanguageContext,
        ui: Optional[Mapping[str, str]] = None
    ) -> None:
        """Render the education carousel, most recent entry first."""
        ui = ui or merge_ui_text(context.language)
        entries = education_entries(document, context)
        if entries is None:
            self.render_placeholder(container, ui)
            return
        items = [self._education_view(entry, ui, position) for position, entry in enumerate(entries)]
        self._replace(container, self.render_fragment(
            "sections/education.html", items=items, ui=ui
        ))

    def render_timeline(
        self,
        container: Tag,
        document: Optional[Document],
        context: LanguageContext,
        ui: Optional[Mapping[str, str]] = None
    ) -> None:
        """Render career positions as a chronological timeline."""
        ui = ui or merge_ui_text(context.language)
        entries = career_entries(document, context)
        if entries is None:
            self.render_placeholder(container, ui)
            return
        items = [self._career_view(entry, ui, position) for position, entry in enumerate(entries)]
        self._replace(container, self.render_fragment(
            "sections/timeline.html", items=items, ui=ui
        ))

    def render_skills(
        self,
        container: Tag,
        document: Optional[Document],
        context: LanguageContext,
        ui: Optional[Mapping[str, str]] = None,
        display: Optional[SkillDisplay] = None
    ) -> None:
        """
        Render skill categories.

        One display mode applies to the whole call: six-point stars with
        ``min(max(level, 0), 6)`` filled, or a 0-100% bar.
        """
        ui = ui or merge_ui_text(context.language)
        display = SkillDisplay(display or self.skill_display)
        categories = self._skill_categories(document, context, ui)
        if categories is None:
            self.render_placeholder(container, ui)
            return
        views = [
            {
                "key": key,
                "title": category.title or NOT_AVAILABLE,
                "items": [self._skill_view(item, display) for item in category.items],
            }
            for key, category in categories
        ]
        self._replace(container, self.render_fragment(
            "sections/skills.html",
            categories=views,
            display=display.value,
            max_stars=MAX_STARS,
            ui=ui
        ))

    def render_projects(
        self,
        container: Tag,
        document: Optional[Document],
        context: LanguageContext,
        ui: Optional[Mapping[str, str]] = None
    ) -> None:
        """Render the projects grid."""
        ui = ui or merge_ui_text(context.language)
        if document is None:
            self.render_placeholder(container, ui)
            return
        raw = section_list(document.section(context.language), _PROJECT_LIST_KEYS)
        if raw is None:
            self.render_placeholder(container, ui)
            return
        projects = parse_entries(ProjectEntry, raw, "projects")
        self._replace(container, self.render_fragment(
            "sections/projects.html", projects=projects, na=NOT_AVAILABLE, ui=ui
        ))

    def render_contact(
        self,
        container: Tag,
        document: Optional[Document],
        context: LanguageContext,
        ui: Optional[Mapping[str, str]] = None
    ) -> None:
        """Render contact details and social links."""
        ui = ui or merge_ui_text(context.language)
        personal = self._personal(document, context)
        if personal is None:
            self.render_placeholder(container, ui)
            return
        contact = personal.contact
        social = dict(personal.social or {})
        for network in ("linkedin", "xing", "github", "twitter", "website"):
            url = getattr(contact, network)
            if url and network not in social:
                social[network] = url
        self._replace(container, self.render_fragment(
            "sections/contact.html", personal=personal, contact=contact, social=social, ui=ui
        ))

    def render_career_detail(
        self,
        container: Tag,
        entry: Optional[CareerPosition],
        context: LanguageContext,
        ui: Optional[Mapping[str, str]] = None
    ) -> None:
        ui = ui or merge_ui_text(context.language)
        if entry is None:
            self._replace(container, self.render_fragment("sections/not_found.html", ui=ui))
            return
        self._replace(container, self.render_fragment(
            "sections/career_detail.html", item=self._career_view(entry, ui), entry=entry, ui=ui
        ))

    def render_education_detail(
        self,
        container: Tag,
        entry: Optional[EducationEntry],
        context: LanguageContext,
        ui: Optional[Mapping[str, str]] = None
    ) -> None:
        ui = ui or merge_ui_text(context.language)
        if entry is None:
            self._replace(container, self.render_fragment("sections/not_found.html", ui=ui))
            return
        self._replace(container, self.render_fragment(
            "sections/education_detail.html",
            item=self._education_view(entry, ui),
            details=entry.details,
            ui=ui
        ))

    def render_banner(self, container: Tag, ui: Mapping[str, str], show: bool) -> None:
        """Show the page-wide load error banner, or clear it."""
        if not show:
            container.clear()
            return
        self._replace(container, self.render_fragment("sections/banner.html", ui=ui))

    def _replace(self, container: Tag, html: str) -> None:
        fragment = BeautifulSoup(html, "html.parser")
        container.clear()
        for node in list(fragment.contents):
            container.append(node)

    def _personal(self, document: Optional[Document], context: LanguageContext) -> Optional[PersonalInfo]:
        if document is None:
            return None
        section = document.section(context.language)
        if not isinstance(section, dict):
            return None
        try:
            return PersonalInfo.model_validate(section)
        except ValidationError as e:
            logger.warning("Invalid personal info: %s", e)
            return None

    def _skill_categories(self, document: Optional[Document], context: LanguageContext, ui: Mapping[str, str]):
        if document is None:
            return None
        section = document.section(context.language)
        if not isinstance(section, dict):
            return None
        groups = section.get("skills", section)
        if not isinstance(groups, dict):
            return None

        keys = [key for key in SKILL_CATEGORIES if key in groups]
        keys += [key for key in groups if key not in SKILL_CATEGORIES]
        categories = []
        for key in keys:
            raw = groups[key]
            if isinstance(raw, list):
                raw = {"items": raw}
            if not isinstance(raw, dict):
                continue
            title = raw.get("title") or ui.get(f"{key}_skills")
            items = parse_entries(SkillItem, raw.get("items"), f"skills.{key}")
            categories.append((key, SkillCategory(title=title, items=items)))
        return categories or None

    def _skill_view(self, item: SkillItem, display: SkillDisplay) -> Dict[str, Any]:
        # levels are six-point values unless the item says it is a percentage
        if item.type == "percentage":
            percent = percentage(item.level)
            filled = star_count(round(percent / 100 * MAX_STARS))
        else:
            filled = star_count(item.level)
            percent = filled / MAX_STARS * 100
        view = {"name": item.name or NOT_AVAILABLE}
        if display is SkillDisplay.STARS:
            view.update(filled=filled, empty=MAX_STARS - filled)
        else:
            view.update(percent=round(percent))
        return view

    def _career_view(
        self,
        entry: CareerPosition,
        ui: Mapping[str, str],
        position: Optional[int] = None
    ) -> Dict[str, Any]:
        company = entry.company or NOT_AVAILABLE
        return {
            "key": entry_key(entry, CAREER_SLUG_FIELDS, position),
            "company": company,
            "position": entry.position or NOT_AVAILABLE,
            "logo": entry.logo,
            "initials": company[:2],
            "location": entry.location,
            "period": format_period(entry.start_date, entry.end_date, ui["present"], entry.duration),
            "summary": entry.summary,
        }

    def _education_view(
        self,
        entry: EducationEntry,
        ui: Mapping[str, str],
        position: Optional[int] = None
    ) -> Dict[str, Any]:
        institution = entry.institution or NOT_AVAILABLE
        return {
            "key": entry_key(entry, EDUCATION_SLUG_FIELDS, position),
            "institution": institution,
            "degree": entry.title or NOT_AVAILABLE,
            "initials": institution[:2],
            "period": format_period(entry.start_date, entry.end_date, ui["present"], entry.time),
        }
