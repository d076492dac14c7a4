"""Tests for page orchestration and language switching."""

import pytest

from cv_site.models.request_models import Language


def texts(soup, selector):
    return [element.get_text(strip=True) for element in soup.select(selector)]


@pytest.mark.asyncio
async def test_load_renders_every_section(controller, content_server):
    """Test the initial load with the browser locale."""
    html = await controller.load("de-DE,de;q=0.9")

    assert controller.context.language is Language.DE
    assert '<html lang="de">' in html
    soup = controller.soup
    assert soup.title.get_text() == "CV DE"
    assert soup.find(id="name").get_text() == "Jane Doe"
    assert texts(soup, "#career-carousel .company-name") == ["New Co", "Old Co", "Side Project Ltd"]
    assert texts(soup, "#education-carousel .qualification") == ["Bachelor"]
    assert soup.select("#skills-section .skill-item")
    assert soup.select("#projects-grid .project-card")
    assert soup.select("#contact-info .contact-email")
    assert soup.find(id="banner").contents == []
    assert sorted(content_server.calls) == sorted([
        "/personal_info.yaml", "/career_de.yaml", "/academic_de.yaml",
        "/skills_de.yaml", "/projects_de.yaml", "/ui_text_de.yaml",
    ])


@pytest.mark.asyncio
async def test_missing_section_shows_placeholder_others_render(controller, content_server):
    """Test that one failed document only affects its own section."""
    del content_server.files["/skills_en.yaml"]
    await controller.load()

    soup = controller.soup
    assert texts(soup, "#skills-section .section-unavailable") == [
        "This section is currently not available."
    ]
    assert texts(soup, "#career-carousel .company-name")[0] == "New Co"
    assert soup.find(id="banner").contents == []


@pytest.mark.asyncio
async def test_banner_when_all_critical_documents_fail(controller, content_server):
    for path in ("/personal_info.yaml", "/career_en.yaml", "/academic_en.yaml", "/skills_en.yaml"):
        del content_server.files[path]
    await controller.load()

    assert controller.all_critical_failed()
    assert controller.soup.select("#banner .error-banner")
    assert controller.soup.select("#projects-grid .project-card")


@pytest.mark.asyncio
async def test_render_all_is_byte_identical(controller):
    """Test that rendering the same state twice produces the same page."""
    first = await controller.load()
    controller.render_all(controller.context)

    assert controller.html() == first


@pytest.mark.asyncio
async def test_switch_language_refetches_only_scoped_documents(controller, content_server):
    """Test that the shared personal document is not fetched again."""
    await controller.load("en")
    content_server.calls.clear()

    assert await controller.switch_language("fr") is True

    assert "/personal_info.yaml" not in content_server.calls
    assert sorted(content_server.calls) == sorted([
        "/career_fr.yaml", "/academic_fr.yaml", "/skills_fr.yaml",
        "/projects_fr.yaml", "/ui_text_fr.yaml",
    ])
    assert controller.context.language is Language.FR
    assert controller.soup.title.get_text() == "CV FR"
    assert texts(controller.soup, "#career-carousel .position-title")[0] == "Ingénieur II"
    assert controller.soup.find(id="name").get_text() == "Jane Doe"


@pytest.mark.asyncio
async def test_switch_back_uses_cache(controller, content_server):
    await controller.load("en")
    await controller.switch_language("de")
    content_server.calls.clear()

    await controller.switch_language("en")

    assert content_server.calls == []
    assert controller.soup.title.get_text() == "CV EN"


@pytest.mark.asyncio
async def test_switch_language_resets_carousels(controller):
    await controller.load()
    carousel = controller.carousels["career-carousel"]
    carousel.next()
    carousel.next()
    assert carousel.index == 2

    await controller.switch_language("de")

    carousel = controller.carousels["career-carousel"]
    assert carousel.index == 0
    items = controller.soup.select("#career-carousel .carousel-item")
    assert ["active" in item["class"] for item in items] == [True, False, False]


@pytest.mark.asyncio
async def test_stale_refresh_is_discarded(controller, content_server):
    """Test that a slow refresh for an older language never overwrites a newer one."""
    await controller.load("en")
    for path in ("/career_de.yaml", "/ui_text_de.yaml"):
        content_server.delays[path] = 0.05

    controller.preference.set("de")
    stale_task = controller._refresh_task
    await controller.switch_language("fr")

    assert await stale_task is False
    assert controller.context.language is Language.FR
    assert controller.soup.title.get_text() == "CV FR"
    assert '<html lang="fr">' in controller.html()


@pytest.mark.asyncio
async def test_initialize_registers_listener_once(controller, preference):
    controller.initialize()
    controller.initialize()
    await controller.load()

    assert preference._listeners == [controller._on_language_change]


@pytest.mark.asyncio
async def test_unsupported_language_is_rejected(controller, content_server):
    html = await controller.load("en")
    content_server.calls.clear()

    assert await controller.switch_language("es") is False

    assert controller.html() == html
    assert controller.preference.current is Language.EN
    assert content_server.calls == []


@pytest.mark.asyncio
async def test_same_language_switch_is_noop(controller):
    await controller.load("de")
    generation = controller.generation

    assert await controller.switch_language("de") is True
    assert controller.generation == generation


@pytest.mark.asyncio
async def test_render_detail_by_id_and_slug(controller):
    """Test detail lookup by explicit id and by derived slug."""
    html, found = await controller.render_detail("career", "new-co")
    assert found
    assert "Engineer II" in html
    assert "Career Details" in html

    html, found = await controller.render_detail("career", "side-project-ltd-founder")
    assert found
    assert "Founder" in html

    html, found = await controller.render_detail("academic", "uni-bsc")
    assert found
    assert "Informatics" in html


@pytest.mark.asyncio
async def test_render_detail_unknown_key(controller):
    html, found = await controller.render_detail("career", "does-not-exist")

    assert not found
    assert "Entry not found." in html


@pytest.mark.asyncio
async def test_render_timeline_page(controller):
    html = await controller.render_timeline_page()

    assert "Career Timeline" in html
    assert html.index("New Co") < html.index("Old Co") < html.index("Side Project Ltd")
