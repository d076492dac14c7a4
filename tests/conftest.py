"""Shared fixtures: an in-memory content server behind httpx.MockTransport."""

import asyncio
from typing import Dict, List

import httpx
import pytest

from cv_site.services.content_store import ContentStore
from cv_site.services.language_preference import LanguagePreference, MemoryPreferenceStorage
from cv_site.services.page_controller import PageController
from cv_site.services.renderer import SectionRenderer
from cv_site.settings import LoadingStrategy


PERSONAL_INFO = """
name: Jane Doe
title: Data Engineer
summary: Builds 'reliable' pipelines.
contact:
  email: jane@example.com
  phone: "+49 30 1234567"
  linkedin: https://www.linkedin.com/in/jane-doe
feedback_email: feedback@example.com
"""


def career_yaml(position: str) -> str:
    return f"""
career:
  - id: old-co
    company: Old Co
    position: {position} I
    start_date: "2020-01"
    end_date: "2022-05"
  - id: new-co
    company: New Co
    position: {position} II
    start_date: "2022-06"
  - company: Side Project Ltd
    position: Founder
"""


def academic_yaml(degree: str) -> str:
    return f"""
academic:
  - id: uni-bsc
    institution: Example University
    degree: {degree}
    start_date: "2014-10"
    end_date: "2017-08"
    details:
      course: Informatics
      diploma: {degree}
      grade: "1.3"
"""


SKILLS = """
skills:
  hard:
    title: Hard Skills
    items:
      - name: Python
        level: 5
  it:
    title: IT Skills
    items:
      - name: SQL
        level: 4
"""

PROJECTS = """
projects:
  - id: pipeline
    name: Pipeline
    description: Streaming pipeline
    technologies: [Python]
"""


def ui_text_yaml(title: str) -> str:
    return f"""
ui_text:
  page_title: {title}
  career_title: {title} Career
"""


def default_files() -> Dict[str, str]:
    files = {"/personal_info.yaml": PERSONAL_INFO}
    for lang, position, degree in (
        ("en", "Engineer", "BSc"),
        ("de", "Ingenieur", "Bachelor"),
        ("fr", "Ingénieur", "Licence"),
    ):
        files[f"/career_{lang}.yaml"] = career_yaml(position)
        files[f"/academic_{lang}.yaml"] = academic_yaml(degree)
        files[f"/skills_{lang}.yaml"] = SKILLS
        files[f"/projects_{lang}.yaml"] = PROJECTS
        files[f"/ui_text_{lang}.yaml"] = ui_text_yaml(f"CV {lang.upper()}")
    return files


class FakeContentServer:
    """Serve YAML text by path and record every request."""

    def __init__(self, files: Dict[str, str]):
        self.files = dict(files)
        self.calls: List[str] = []
        self.delays: Dict[str, float] = {}

    async def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.calls.append(path)
        delay = self.delays.get(path)
        if delay:
            await asyncio.sleep(delay)
        if path not in self.files:
            return httpx.Response(404, text="Not Found")
        return httpx.Response(200, text=self.files[path])

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            transport=httpx.MockTransport(self.handler),
            base_url="http://content"
        )


@pytest.fixture
def content_server():
    return FakeContentServer(default_files())


@pytest.fixture
def store(content_server):
    return ContentStore(content_server.client(), LoadingStrategy.PER_LANGUAGE_FILES)


@pytest.fixture
def preference():
    return LanguagePreference(MemoryPreferenceStorage())


@pytest.fixture
def renderer():
    return SectionRenderer()


@pytest.fixture
def controller(store, preference, renderer):
    return PageController(store, preference, renderer)


@pytest.fixture
def content_server_factory():
    return FakeContentServer
