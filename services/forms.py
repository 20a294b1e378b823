"""Entity forms for the profile builder.

Skill, certification and project forms pick a catalog entry with a
SearchSelector and carry the association's extra fields. Nothing is sent to
the backend until submit(), and submit() refuses to send when no entry has
been selected.
"""

import logging

import pydantic

from config_loader import SearchSettings, get_search_settings
from search_selector import SearchSelector

from .builder_service import BuilderService
from .catalog_service import CatalogService
from .exceptions import ValidationError
from .models import (
    CandidateCertification,
    CandidateCertificationCreate,
    CandidateProject,
    CandidateProjectCreate,
    CandidateSkill,
    CandidateSkillCreate,
    WorkExperience,
    WorkExperienceCreate,
)

logger = logging.getLogger(__name__)


def build_payload(model: type[pydantic.BaseModel], **fields):
    """Construct a request model, reporting bad input as ValidationError."""
    try:
        return model(**fields)
    except pydantic.ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or None
        raise ValidationError(f"{field}: {first['msg']}" if field else first["msg"], field=field) from e


class CatalogPickerForm:
    """Base for forms whose primary field is a searched catalog entry."""

    resource = ""
    label = ""
    id_field = ""

    def __init__(
        self,
        catalog: CatalogService,
        builder: BuilderService,
        settings: SearchSettings | None = None,
    ):
        settings = settings or get_search_settings(catalog.config)
        self.builder = builder
        self.selector = SearchSelector(
            lambda text: catalog.search_items(self.resource, text, settings.limit),
            min_query_length=settings.min_query_length,
            debounce=settings.debounce,
            cancel_superseded=settings.cancel_superseded,
        )

    def selected_id(self) -> str:
        """ID of the selected entry.

        Raises:
            ValidationError: If nothing is selected.
        """
        item = self.selector.selection
        if item is None:
            raise ValidationError(f"Please select a {self.label}", field=self.id_field)
        return item.id

    async def submit(self):
        raise NotImplementedError

    async def aclose(self) -> None:
        await self.selector.aclose()


class SkillForm(CatalogPickerForm):
    """Add a skill with an optional proficiency level (1-5) and years of experience."""

    resource = "skills"
    label = "skill"
    id_field = "skill_id"

    def __init__(self, catalog, builder, settings=None, level=None, years_experience=None):
        super().__init__(catalog, builder, settings)
        self.level: int | None = level
        self.years_experience: float | None = years_experience

    async def submit(self) -> CandidateSkill:
        data = build_payload(
            CandidateSkillCreate,
            skill_id=self.selected_id(),
            level=self.level,
            years_experience=self.years_experience,
        )
        skill = await self.builder.add_skill(data)
        logger.info("Added skill %s", data.skill_id)
        return skill


class CertificationForm(CatalogPickerForm):
    resource = "certifications"
    label = "certification"
    id_field = "cert_id"

    def __init__(
        self,
        catalog,
        builder,
        settings=None,
        credential_id=None,
        issue_date=None,
        expiry_date=None,
    ):
        super().__init__(catalog, builder, settings)
        self.credential_id: str | None = credential_id
        self.issue_date: str | None = issue_date
        self.expiry_date: str | None = expiry_date

    async def submit(self) -> CandidateCertification:
        data = build_payload(
            CandidateCertificationCreate,
            cert_id=self.selected_id(),
            credential_id=self.credential_id,
            issue_date=self.issue_date,
            expiry_date=self.expiry_date,
        )
        return await self.builder.add_certification(data)


class ProjectForm(CatalogPickerForm):
    resource = "projects"
    label = "project"
    id_field = "project_id"

    def __init__(self, catalog, builder, settings=None, start_date=None, end_date=None):
        super().__init__(catalog, builder, settings)
        self.start_date: str | None = start_date
        self.end_date: str | None = end_date

    async def submit(self) -> CandidateProject:
        data = build_payload(
            CandidateProjectCreate,
            project_id=self.selected_id(),
            start_date=self.start_date,
            end_date=self.end_date,
        )
        return await self.builder.add_project(data)


class WorkExperienceForm:
    """Create a work experience entry, or update one when `editing` is given."""

    def __init__(
        self,
        builder: BuilderService,
        editing: WorkExperience | None = None,
        **fields,
    ):
        self.builder = builder
        self.editing = editing
        source = editing.model_dump() if editing else {}
        self.company: str = fields.get("company", source.get("company") or "")
        self.role: str = fields.get("role", source.get("role") or "")
        self.location: str | None = fields.get("location", source.get("location"))
        self.details: str | None = fields.get("details", source.get("details"))
        self.start_date: str | None = fields.get("start_date", source.get("start_date"))
        self.end_date: str | None = fields.get("end_date", source.get("end_date"))

    async def submit(self) -> WorkExperience:
        if not self.company.strip():
            raise ValidationError("Company is required", field="company")
        if not self.role.strip():
            raise ValidationError("Role is required", field="role")

        data = build_payload(
            WorkExperienceCreate,
            company=self.company.strip(),
            role=self.role.strip(),
            location=self.location,
            details=self.details,
            start_date=self.start_date,
            end_date=self.end_date,
        )
        if self.editing:
            return await self.builder.update_work_experience(self.editing.work_exp_id, data)
        return await self.builder.create_work_experience(data)
