"""
Candidate profile and job posting models.

These are the structured inputs of the match scorer and the job
indexing pipeline.
"""

from typing import Optional, Union

from pydantic import Field, field_validator

from .base import EmbeddedModel


def _clean_strings(values: list[str]) -> list[str]:
    return [v for v in (s.strip() for s in values) if v]


class CandidateProfile(EmbeddedModel):
    """Structured candidate data used for matching."""

    skills: list[str] = Field(default_factory=list)
    experience: str = ""
    industry: Optional[str] = None
    work_type: Optional[str] = Field(None, alias="workType")
    salary_min: Optional[float] = Field(None, alias="salaryMin")
    salary_max: Optional[float] = Field(None, alias="salaryMax")
    location: Optional[str] = None

    @field_validator("skills")
    @classmethod
    def clean_skills(cls, v: list[str]) -> list[str]:
        """Drop blank skill entries."""
        return _clean_strings(v)


class JobPosting(EmbeddedModel):
    """Structured job posting data used for matching and indexing."""

    id: Optional[Union[int, str]] = None
    title: str = ""
    company: str = ""
    skills: list[str] = Field(default_factory=list)
    requirements: list[str] = Field(default_factory=list)
    industry: Optional[str] = None
    work_type: Optional[str] = Field(None, alias="workType")
    salary_min: Optional[float] = Field(None, alias="salaryMin")
    salary_max: Optional[float] = Field(None, alias="salaryMax")
    location: Optional[str] = None
    description: str = ""

    @field_validator("skills", "requirements")
    @classmethod
    def clean_lists(cls, v: list[str]) -> list[str]:
        """Drop blank entries while keeping order."""
        return _clean_strings(v)

    @property
    def display_title(self) -> str:
        if self.title and self.company:
            return f"{self.title} at {self.company}"
        return self.title or self.company or "this position"
