"""Site configuration settings."""

import logging
from enum import Enum
from pathlib import Path
from typing import Optional
from pydantic_settings import BaseSettings

from cv_site.models.request_models import Language


class LoadingStrategy(str, Enum):
    """How content documents are laid out on the content server."""

    PER_LANGUAGE_FILES = "per_language_files"
    LANGUAGE_KEYED = "language_keyed"


class SkillDisplay(str, Enum):
    """How skill levels are drawn."""

    STARS = "stars"
    PERCENTAGE = "percentage"


class SiteSettings(BaseSettings):
    """
    CV site configuration settings.

    ``preference_file`` stores one language preference for the whole site,
    shared by every visitor. It is meant for single-user or local deployments
    such as a kiosk or a personal preview; when it is unset each visitor keeps
    their own preference in the ``preferred_language`` cookie.
    """

    data_dir: Path = Path(__file__).parent / "data"
    content_base_url: Optional[str] = None
    loading_strategy: LoadingStrategy = LoadingStrategy.PER_LANGUAGE_FILES
    default_language: Language = Language.EN
    preference_file: Optional[Path] = None
    skill_display: SkillDisplay = SkillDisplay.STARS
    request_timeout: float = 10.0
    log_level: str = "INFO"

    class Config:
        env_prefix = "CV_SITE_"
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"


def configure_logging(settings: SiteSettings) -> None:
    """Configure root logging from settings."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
