"""FastAPI application for the CV site."""

from typing import Optional
from fastapi import FastAPI, Header, HTTPException, Query, Request, status
from fastapi.responses import HTMLResponse, Response

from cv_site.i18n import merge_ui_text
from cv_site.models.request_models import (
    FeedbackRequest,
    Language,
    LanguageChangeRequest,
    SUPPORTED_LANGUAGES,
)
from cv_site.models.response_models import (
    ErrorResponse,
    FeedbackResponse,
    HealthResponse,
    LanguageResponse,
    RootResponse,
)
from cv_site.services.content_store import ContentStore, DocumentName, build_content_client
from cv_site.services.feedback import FeedbackService
from cv_site.services.language_preference import (
    STORAGE_KEY,
    JsonFilePreferenceStorage,
    LanguagePreference,
    MemoryPreferenceStorage,
)
from cv_site.services.page_controller import PageController
from cv_site.services.renderer import SectionRenderer
from cv_site.settings import SiteSettings, configure_logging

VERSION = "1.0.0"
COOKIE_MAX_AGE = 60 * 60 * 24 * 365

app = FastAPI(
    title="CV Site",
    description="""Multilingual personal CV and portfolio site rendered from YAML content.

## Features

* **Content documents**: personal info, career, education, skills, projects and UI text in YAML
* **Languages**: English, German and French with a persisted preference
* **Sections**: career and education carousels, skills, timeline, projects and contact details
* **Detail pages**: career and academic entries addressed by id or slug""",
    version=VERSION,
    tags_metadata=[
        {
            "name": "health",
            "description": "Health check and status endpoints"
        },
        {
            "name": "pages",
            "description": "Rendered HTML pages"
        },
        {
            "name": "preferences",
            "description": "Language preference endpoints"
        },
        {
            "name": "feedback",
            "description": "Feedback form endpoint (simulated delivery)"
        }
    ]
)

# Initialize services
settings = SiteSettings()
configure_logging(settings)
content_store = ContentStore(build_content_client(settings), settings.loading_strategy)
renderer = SectionRenderer(skill_display=settings.skill_display)
feedback_service = FeedbackService()


def preference_for(request: Request) -> LanguagePreference:
    """
    Build the language preference for one visitor.

    The preference lives in the ``preferred_language`` cookie unless a
    preference file is configured, in which case all visitors share it.
    """
    if settings.preference_file is not None:
        storage = JsonFilePreferenceStorage(settings.preference_file)
    else:
        stored = request.cookies.get(STORAGE_KEY)
        storage = MemoryPreferenceStorage({STORAGE_KEY: stored} if stored else None)
    return LanguagePreference(storage, settings.default_language)


def remember(response: Response, preference: LanguagePreference) -> Response:
    """Write the visitor's resolved language back to the preference cookie."""
    language = preference.storage.get(STORAGE_KEY)
    if language:
        response.set_cookie(STORAGE_KEY, language, max_age=COOKIE_MAX_AGE, samesite="lax")
    return response


def page_controller_for(
    request: Request,
    lang: Optional[Language],
    accept_language: Optional[str]
) -> PageController:
    preference = preference_for(request)
    preference.resolve(accept_language)
    if lang is not None:
        preference.set(lang)
    return PageController(content_store, preference, renderer)


@app.get(
    "/",
    response_model=RootResponse,
    status_code=status.HTTP_200_OK,
    summary="Root endpoint",
    description="Returns API information including name and version",
    tags=["health"]
)
async def root():
    """
    Root endpoint.

    Returns basic API information including name and version.
    """
    return RootResponse(message="CV Site", version=VERSION)


@app.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
    description="Checks if the service is running and healthy",
    tags=["health"]
)
async def health():
    """
    Health check endpoint.

    Returns the health status of the service.
    """
    return HealthResponse(status="ok")


@app.get(
    "/cv",
    response_class=HTMLResponse,
    status_code=status.HTTP_200_OK,
    summary="CV page",
    description="""
    Renders the full CV page.

    The language comes from the `lang` query parameter, then the stored
    preference, then the `Accept-Language` header, then English. Sections
    whose content cannot be loaded show a placeholder.
    """,
    tags=["pages"]
)
async def cv_page(
    request: Request,
    lang: Optional[Language] = Query(None, description="Language to render (en, de, fr)"),
    accept_language: Optional[str] = Header(None)
):
    """Render the CV page."""
    controller = page_controller_for(request, lang, accept_language)
    html = await controller.load(accept_language)
    return remember(HTMLResponse(html), controller.preference)


@app.get(
    "/timeline",
    response_class=HTMLResponse,
    status_code=status.HTTP_200_OK,
    summary="Career timeline page",
    tags=["pages"]
)
async def timeline_page(
    request: Request,
    lang: Optional[Language] = Query(None, description="Language to render (en, de, fr)"),
    accept_language: Optional[str] = Header(None)
):
    """Render the career timeline, most recent position first."""
    controller = page_controller_for(request, lang, accept_language)
    html = await controller.render_timeline_page()
    return remember(HTMLResponse(html), controller.preference)


@app.get(
    "/career/{key}",
    response_class=HTMLResponse,
    status_code=status.HTTP_200_OK,
    summary="Career detail page",
    description="Renders one career position addressed by its id or its company-position slug",
    tags=["pages"],
    responses={
        404: {
            "description": "Not found - No career entry matches the key"
        }
    }
)
async def career_detail(
    request: Request,
    key: str,
    lang: Optional[Language] = Query(None, description="Language to render (en, de, fr)"),
    accept_language: Optional[str] = Header(None)
):
    """Render a career detail page."""
    controller = page_controller_for(request, lang, accept_language)
    html, found = await controller.render_detail("career", key)
    response = HTMLResponse(html, status_code=200 if found else 404)
    return remember(response, controller.preference)


@app.get(
    "/academic/{key}",
    response_class=HTMLResponse,
    status_code=status.HTTP_200_OK,
    summary="Academic detail page",
    description="Renders one education entry addressed by its id or its institution-degree slug",
    tags=["pages"],
    responses={
        404: {
            "description": "Not found - No education entry matches the key"
        }
    }
)
async def academic_detail(
    request: Request,
    key: str,
    lang: Optional[Language] = Query(None, description="Language to render (en, de, fr)"),
    accept_language: Optional[str] = Header(None)
):
    """Render an academic detail page."""
    controller = page_controller_for(request, lang, accept_language)
    html, found = await controller.render_detail("academic", key)
    response = HTMLResponse(html, status_code=200 if found else 404)
    return remember(response, controller.preference)


@app.get(
    "/api/v1/language",
    response_model=LanguageResponse,
    status_code=status.HTTP_200_OK,
    summary="Get active language",
    tags=["preferences"]
)
async def get_language(
    request: Request,
    response: Response,
    accept_language: Optional[str] = Header(None)
):
    """Resolve the visitor's language from the stored preference or the browser locale."""
    preference = preference_for(request)
    language = preference.resolve(accept_language)
    remember(response, preference)
    return LanguageResponse(language=language.value, supported=list(SUPPORTED_LANGUAGES))


@app.post(
    "/api/v1/language",
    response_model=LanguageResponse,
    status_code=status.HTTP_200_OK,
    summary="Set active language",
    description="Stores the language preference; unsupported codes are rejected with 422",
    tags=["preferences"],
    responses={
        422: {
            "description": "Validation error - Unsupported language"
        }
    }
)
async def set_language(request: Request, response: Response, payload: LanguageChangeRequest):
    """
    Set the visitor's language.

    **Example:**
    ```json
    {
      "language": "de"
    }
    ```
    """
    preference = preference_for(request)
    preference.set(payload.language)
    remember(response, preference)
    return LanguageResponse(language=preference.current.value, supported=list(SUPPORTED_LANGUAGES))


@app.post(
    "/api/v1/feedback",
    response_model=FeedbackResponse,
    status_code=status.HTTP_200_OK,
    summary="Submit feedback",
    description="""
    Validates a feedback message and acknowledges it.

    No email is sent; delivery is simulated.
    """,
    tags=["feedback"],
    responses={
        400: {
            "description": "Bad request - Invalid name, email or message",
            "model": ErrorResponse
        }
    }
)
async def submit_feedback(payload: FeedbackRequest):
    """
    Submit the feedback form.

    **Example:**
    ```json
    {
      "name": "Jane Doe",
      "email": "jane@example.com",
      "message": "Great portfolio!",
      "language": "en"
    }
    ```
    """
    documents = await content_store.fetch_all(
        (DocumentName.UI_TEXT, DocumentName.PERSONAL), payload.language
    )
    ui_document = documents[DocumentName.UI_TEXT]
    ui = merge_ui_text(
        payload.language,
        ui_document.section(payload.language) if ui_document is not None else None
    )
    personal_document = documents[DocumentName.PERSONAL]
    personal = personal_document.section(payload.language) if personal_document is not None else None
    recipient = personal.get("feedback_email") if isinstance(personal, dict) else None

    try:
        message = feedback_service.submit(payload, ui, recipient)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"{ui['feedback_error_message']} ({e})")
    return FeedbackResponse(status="success", message=message)
