"""Response models for API endpoints."""

from typing import List
from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Error response model."""

    detail: str = Field(
        ...,
        description="Error message describing what went wrong",
        examples=["Career entry not found: acme-engineer"]
    )


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str = Field(
        ...,
        description="Service status",
        examples=["ok"]
    )


class RootResponse(BaseModel):
    """Root endpoint response model."""

    message: str = Field(
        ...,
        description="API name and version information",
        examples=["CV Site"]
    )
    version: str = Field(
        ...,
        description="API version",
        examples=["1.0.0"]
    )


class LanguageResponse(BaseModel):
    """Active language response model."""

    language: str = Field(
        ...,
        description="Currently active language code",
        examples=["de"]
    )
    supported: List[str] = Field(
        ...,
        description="All supported language codes",
        examples=[["en", "de", "fr"]]
    )


class FeedbackResponse(BaseModel):
    """Feedback submission response model."""

    status: str = Field(
        ...,
        description="Submission status (success or error)",
        examples=["success"]
    )
    message: str = Field(
        ...,
        description="Localized acknowledgement message",
        examples=["Thank you! Your message has been sent."]
    )
