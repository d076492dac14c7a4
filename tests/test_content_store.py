"""Tests for the content store."""

import httpx
import pytest

from cv_site.services.content_store import (
    ContentStore,
    DocumentName,
    DocumentScope,
    build_content_client,
)
from cv_site.settings import LoadingStrategy, SiteSettings


def test_document_paths_per_language_files(store):
    """Test request paths for per-language files."""
    assert store.document_path("career", "de") == "/career_de.yaml"
    assert store.document_path(DocumentName.EDUCATION, "fr") == "/academic_fr.yaml"
    assert store.document_path("ui_text", "en") == "/ui_text_en.yaml"
    assert store.document_path("personal", "de") == "/personal_info.yaml"


def test_document_paths_language_keyed():
    """Test request paths for language-keyed documents."""
    store = ContentStore(httpx.AsyncClient(), LoadingStrategy.LANGUAGE_KEYED)
    assert store.document_path("career") == "/career.yml"
    assert store.document_path("ui_text") == "/translations.yml"
    assert not store.is_language_scoped("career")


def test_language_scoped_documents(store):
    """Only the shared personal document survives a language switch."""
    assert store.is_language_scoped("career")
    assert store.is_language_scoped("ui_text")
    assert not store.is_language_scoped("personal")


@pytest.mark.asyncio
async def test_fetch_parses_and_caches(store, content_server):
    """Test that a repeated fetch is served from the cache."""
    first = await store.fetch("career", "en")
    second = await store.fetch("career", "en")

    assert first is second
    assert first.scope is DocumentScope.SCOPED
    assert first.section("en")["career"][0]["company"] == "Old Co"
    assert content_server.calls == ["/career_en.yaml"]


@pytest.mark.asyncio
async def test_cache_key_includes_language(store, content_server):
    """Test that each language has its own cache entry."""
    await store.fetch("career", "en")
    await store.fetch("career", "de")

    assert content_server.calls == ["/career_en.yaml", "/career_de.yaml"]
    assert store.cached_keys() == ["career:de", "career:en"]


@pytest.mark.asyncio
async def test_shared_document_fetched_once_across_languages(store, content_server):
    """Test that the personal document is not fetched again for another language."""
    await store.fetch("personal", "en")
    await store.fetch("personal", "fr")

    assert content_server.calls == ["/personal_info.yaml"]


@pytest.mark.asyncio
async def test_fetch_missing_document_returns_none(store, content_server):
    """Test that a 404 yields None and is not cached."""
    del content_server.files["/skills_en.yaml"]

    assert await store.fetch("skills", "en") is None
    assert await store.fetch("skills", "en") is None
    assert content_server.calls.count("/skills_en.yaml") == 2


@pytest.mark.asyncio
async def test_fetch_invalid_yaml_returns_none(store, content_server):
    """Test that malformed YAML yields None."""
    content_server.files["/career_en.yaml"] = "career: [unclosed"
    assert await store.fetch("career", "en") is None


@pytest.mark.asyncio
async def test_fetch_non_mapping_returns_none(store, content_server):
    """Test that a document whose root is not a mapping yields None."""
    content_server.files["/career_en.yaml"] = "- one\n- two\n"
    assert await store.fetch("career", "en") is None


@pytest.mark.asyncio
async def test_fetch_transport_error_returns_none():
    """Test that a network failure yields None."""
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://content")
    store = ContentStore(client)
    assert await store.fetch("career", "en") is None


@pytest.mark.asyncio
async def test_fetch_scoped_document_without_language_returns_none(store, content_server):
    """Test that a language-scoped document needs a language."""
    assert await store.fetch("career") is None
    assert content_server.calls == []


@pytest.mark.asyncio
async def test_fetch_unknown_document_returns_none(store):
    """Test that unknown document names yield None."""
    assert await store.fetch("hobbies", "en") is None


@pytest.mark.asyncio
async def test_fetch_all_partial_failure(store, content_server):
    """Test that one failed document does not affect its siblings."""
    del content_server.files["/career_en.yaml"]

    results = await store.fetch_all(["career", "skills", "personal"], "en")

    assert results[DocumentName.CAREER] is None
    assert results[DocumentName.SKILLS] is not None
    assert results[DocumentName.PERSONAL] is not None


@pytest.mark.asyncio
async def test_clear_cache(store, content_server):
    """Test clearing one entry and then the whole cache."""
    await store.fetch_all(["career", "skills"], "en")

    store.clear_cache("career", "en")
    assert store.cached_keys() == ["skills:en"]

    store.clear_cache()
    assert store.cached_keys() == []

    await store.fetch("skills", "en")
    assert content_server.calls.count("/skills_en.yaml") == 2


@pytest.mark.asyncio
async def test_language_keyed_strategy(content_server_factory):
    """Test documents whose root maps language codes to content."""
    server = content_server_factory({
        "/career.yml": "en:\n  career: []\nde:\n  career:\n    - company: Firma\n",
    })
    store = ContentStore(server.client(), LoadingStrategy.LANGUAGE_KEYED)

    document = await store.fetch("career", "de")
    again = await store.fetch("career", "en")

    assert document is again
    assert document.scope is DocumentScope.KEYED
    assert document.section("de")["career"][0]["company"] == "Firma"
    assert document.section("en") == {"career": []}
    assert document.section("fr") is None
    assert server.calls == ["/career.yml"]


@pytest.mark.asyncio
async def test_language_keyed_strategy_rejects_unkeyed_document(content_server_factory):
    """Test that a language-keyed store refuses a per-language shaped document."""
    server = content_server_factory({"/career.yml": "career:\n  - company: Firma\n"})
    store = ContentStore(server.client(), LoadingStrategy.LANGUAGE_KEYED)

    assert await store.fetch("career", "en") is None


@pytest.mark.asyncio
async def test_build_content_client_serves_data_dir(tmp_path):
    """Test the in-process client over a data directory."""
    (tmp_path / "personal_info.yaml").write_text("name: Local Person\n", encoding="utf-8")
    settings = SiteSettings(data_dir=tmp_path)

    async with build_content_client(settings) as client:
        store = ContentStore(client)
        document = await store.fetch("personal")
        missing = await store.fetch("career", "en")

    assert document.section("en") == {"name": "Local Person"}
    assert missing is None
