"""Pydantic models for CV Tailor services.

Response models mirror the backend's JSON; *Create / *Update models are the
request payloads. Optional text fields treat blank or whitespace-only input
as "not provided" (None), and payloads are serialized with exclude_none so
unset fields are omitted from the request body.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Annotated

from pydantic import BaseModel, BeforeValidator, Field

from search_selector import Identifier


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _normalize_url(value):
    """Add https:// to profile URLs typed without a scheme.

    Examples:
        "linkedin.com/in/jane" -> "https://linkedin.com/in/jane"
        "  " -> None
    """
    value = _blank_to_none(value)
    if isinstance(value, str):
        value = value.strip()
        if not re.match(r"^https?://", value, re.IGNORECASE):
            value = f"https://{value}"
    return value


OptionalText = Annotated[str | None, BeforeValidator(_blank_to_none)]
OptionalDate = Annotated[date | None, BeforeValidator(_blank_to_none)]
ProfileUrl = Annotated[str | None, BeforeValidator(_normalize_url)]


class RequestModel(BaseModel):
    """Base for request payloads."""

    def to_payload(self) -> dict:
        """JSON-ready body with unset optional fields omitted."""
        return self.model_dump(mode="json", exclude_none=True)


# =============================================================================
# Candidates
# =============================================================================


class Candidate(BaseModel):
    """A candidate account/profile."""

    id: Identifier
    full_name: str
    email: str
    phone: str | None = None
    linkedin: str | None = None
    github: str | None = None


class CandidateCreate(RequestModel):
    """Payload to create a candidate profile."""

    full_name: str
    email: str
    password: OptionalText = None
    phone: OptionalText = None
    linkedin: ProfileUrl = None
    github: ProfileUrl = None


class CandidateUpdate(RequestModel):
    """Partial update of the signed-in candidate. Only set fields are sent."""

    full_name: OptionalText = None
    email: OptionalText = None
    phone: OptionalText = None
    linkedin: ProfileUrl = None
    github: ProfileUrl = None


class SignUpForm(BaseModel):
    """Registration form input, including the confirmation field."""

    full_name: str
    email: str
    password: str
    confirm_password: str
    phone: OptionalText = None
    linkedin: ProfileUrl = None
    github: ProfileUrl = None

    def to_registration(self) -> CandidateCreate:
        return CandidateCreate(
            full_name=self.full_name,
            email=self.email,
            password=self.password,
            phone=self.phone,
            linkedin=self.linkedin,
            github=self.github,
        )


# =============================================================================
# Catalog entities
# =============================================================================


class Skill(BaseModel):
    skill_id: Identifier
    name: str
    tag_id: Identifier | None = None


class SkillCreate(RequestModel):
    name: str
    tag_id: Identifier | None = None


class Certification(BaseModel):
    cert_id: Identifier
    name: str
    issue_date: str | None = None
    expiry_date: str | None = None


class CertificationCreate(RequestModel):
    name: str
    issue_date: OptionalDate = None
    expiry_date: OptionalDate = None


class Project(BaseModel):
    project_id: Identifier
    name: str
    description: str | None = None
    url: str | None = None
    start_date: str | None = None
    end_date: str | None = None


class ProjectCreate(RequestModel):
    name: str
    description: OptionalText = None
    url: OptionalText = None
    start_date: OptionalDate = None
    end_date: OptionalDate = None


class JobDescription(BaseModel):
    jd_id: Identifier
    title: str
    description: str | None = None


class JobDescriptionCreate(RequestModel):
    title: str
    description: OptionalText = None


class Resume(BaseModel):
    resume_id: Identifier
    candidate_id: Identifier
    jd_id: Identifier
    resume_score: float | None = None
    created_at: str | None = None


class ResumeCreate(RequestModel):
    candidate_id: Identifier
    jd_id: Identifier


# =============================================================================
# Profile builder entities (owned by the signed-in candidate)
# =============================================================================


class WorkExperience(BaseModel):
    work_exp_id: Identifier
    company: str
    role: str
    location: str | None = None
    details: str | None = None
    start_date: str | None = None
    end_date: str | None = None


class WorkExperienceCreate(RequestModel):
    """Work experience entry. company and role are required."""

    company: str
    role: str
    location: OptionalText = None
    details: OptionalText = None
    start_date: OptionalDate = None
    end_date: OptionalDate = None


class CandidateSkill(BaseModel):
    skill_id: Identifier
    skill_name: str | None = None
    level: int | None = None
    years_experience: float | None = None


class CandidateSkillCreate(RequestModel):
    """Associate a catalog skill with the candidate.

    level is 1 (beginner) to 5 (expert); both auxiliary fields are optional.
    """

    skill_id: Identifier
    level: int | None = Field(default=None, ge=1, le=5)
    years_experience: float | None = Field(default=None, ge=0)


class CandidateCertification(BaseModel):
    cert_id: Identifier
    cert_name: str | None = None
    credential_id: str | None = None
    issue_date: str | None = None
    expiry_date: str | None = None


class CandidateCertificationCreate(RequestModel):
    cert_id: Identifier
    credential_id: OptionalText = None
    issue_date: OptionalDate = None
    expiry_date: OptionalDate = None


class CandidateProject(BaseModel):
    project_id: Identifier
    project_name: str | None = None
    project_description: str | None = None
    project_url: str | None = None
    start_date: str | None = None
    end_date: str | None = None


class CandidateProjectCreate(RequestModel):
    project_id: Identifier
    start_date: OptionalDate = None
    end_date: OptionalDate = None


class ProfileSnapshot(BaseModel):
    """Everything the profile builder shows, loaded in one pass."""

    work_experience: list[WorkExperience] = Field(default_factory=list)
    skills: list[CandidateSkill] = Field(default_factory=list)
    certifications: list[CandidateCertification] = Field(default_factory=list)
    projects: list[CandidateProject] = Field(default_factory=list)


# =============================================================================
# Session
# =============================================================================


class Session(BaseModel):
    """An authenticated session issued by the backend."""

    access_token: str
    user_id: Identifier
    email: str
    name: str | None = None
    expires_at: float
    """Unix timestamp after which the token is treated as expired."""
