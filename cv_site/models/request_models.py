"""Request models for API endpoints."""

from enum import Enum
from pydantic import BaseModel, Field


class Language(str, Enum):
    """Supported languages."""

    EN = "en"
    DE = "de"
    FR = "fr"


SUPPORTED_LANGUAGES = tuple(language.value for language in Language)
DEFAULT_LANGUAGE = Language.EN


class LanguageChangeRequest(BaseModel):
    """Request model for switching the active language."""

    language: Language = Field(
        ...,
        description="Language to display the site in (en, de or fr)",
        examples=["de"]
    )


class FeedbackRequest(BaseModel):
    """Request model for the feedback form."""

    name: str = Field(
        ...,
        description="Sender name (at least 2 characters)",
        examples=["Jane Doe"]
    )
    email: str = Field(
        ...,
        description="Sender email address",
        examples=["jane@example.com"]
    )
    message: str = Field(
        ...,
        description="Feedback message (at least 2 characters)",
        examples=["Great portfolio!"]
    )
    language: Language = Field(
        DEFAULT_LANGUAGE,
        description="Language for the acknowledgement message",
        examples=["en"]
    )
