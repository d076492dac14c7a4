"""Pydantic models for CV content documents."""

from datetime import date
from typing import Any, Dict, List, Optional, Union
from pydantic import AliasChoices, BaseModel, Field


DateValue = Optional[Union[date, int, str]]


class ContentModel(BaseModel):
    """Base for content parsed from YAML; bare numbers in text fields become strings."""

    class Config:
        coerce_numbers_to_str = True


class ContactInfo(ContentModel):
    """Contact information model."""

    email: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    linkedin: Optional[str] = None
    xing: Optional[str] = None
    github: Optional[str] = None
    twitter: Optional[str] = None
    website: Optional[str] = None


class PersonalInfo(ContentModel):
    """Personal information model."""

    name: Optional[str] = None
    title: Optional[str] = None
    summary: Optional[str] = None
    contact: ContactInfo = Field(default_factory=ContactInfo)
    social: Optional[Dict[str, str]] = None
    feedback_email: Optional[str] = None


class StarExample(ContentModel):
    """Situation / target / actions / result highlight."""

    situation: Optional[str] = None
    target: Optional[str] = None
    actions: Optional[str] = None
    result: Optional[str] = None


class CareerDetails(ContentModel):
    """Long-form details shown on a career detail page."""

    scope: Optional[str] = None
    achievements: Optional[List[str]] = None
    star_examples: Optional[List[StarExample]] = None


class CareerPosition(ContentModel):
    """Career position model."""

    id: Optional[str] = None
    company: Optional[str] = Field(
        None, validation_alias=AliasChoices("company", "companyName")
    )
    position: Optional[str] = Field(
        None, validation_alias=AliasChoices("position", "title")
    )
    logo: Optional[str] = Field(
        None, validation_alias=AliasChoices("logo", "companyLogo")
    )
    location: Optional[str] = None
    start_date: DateValue = Field(
        None, validation_alias=AliasChoices("start_date", "startDate")
    )
    end_date: DateValue = Field(
        None, validation_alias=AliasChoices("end_date", "endDate")
    )
    duration: Optional[str] = None
    summary: Optional[str] = Field(
        None, validation_alias=AliasChoices("summary", "briefDescription")
    )
    details: Optional[CareerDetails] = None


class EducationDetails(ContentModel):
    """Long-form details shown on an academic detail page."""

    course: Optional[str] = None
    description: Optional[str] = None
    diploma: Optional[str] = None
    grade: Optional[str] = None


class EducationEntry(ContentModel):
    """Education entry model."""

    id: Optional[str] = None
    institution: Optional[str] = Field(
        None, validation_alias=AliasChoices("institution", "name")
    )
    degree: Optional[str] = Field(
        None, validation_alias=AliasChoices("degree", "qualification")
    )
    start_date: DateValue = Field(
        None, validation_alias=AliasChoices("start_date", "startDate")
    )
    end_date: DateValue = Field(
        None,
        validation_alias=AliasChoices("end_date", "endDate", "graduationDate"),
    )
    time: Optional[str] = None
    details: Optional[EducationDetails] = None

    @property
    def title(self) -> Optional[str]:
        if self.degree:
            return self.degree
        if self.details is not None:
            return self.details.diploma or self.details.course
        return None


class SkillItem(ContentModel):
    """Skill with a proficiency level (0-6 points or 0-100 percent)."""

    name: Optional[str] = None
    level: Any = Field(None, validation_alias=AliasChoices("level", "proficiency"))
    type: Optional[str] = None


class SkillCategory(ContentModel):
    """Titled group of skills."""

    title: Optional[str] = None
    items: List[SkillItem] = Field(default_factory=list)


class ProjectEntry(ContentModel):
    """Portfolio project model."""

    id: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    technologies: Optional[List[str]] = None
    url: Optional[str] = None
    year: Optional[Union[int, str]] = None
