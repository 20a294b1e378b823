"""Catalog service - shared reference entities.

Skills, certifications, projects, job descriptions and resumes all follow
the same list/get/create shape under /{resource}/. The first three also
support partial-name search for the entity pickers.
"""

import logging

from search_selector import SearchResultItem

from .base_service import BaseService
from .models import (
    Certification,
    CertificationCreate,
    JobDescription,
    JobDescriptionCreate,
    Project,
    ProjectCreate,
    Resume,
    ResumeCreate,
    Skill,
    SkillCreate,
)

logger = logging.getLogger(__name__)

# resource name -> (path, response model)
RESOURCES = {
    "skills": ("/skills/", Skill),
    "certifications": ("/certifications/", Certification),
    "projects": ("/projects/", Project),
    "job-descriptions": ("/job-descriptions/", JobDescription),
    "resumes": ("/resumes/", Resume),
}

SEARCHABLE = ("skills", "certifications", "projects")


class CatalogService(BaseService):
    """Service for catalog entities. Catalog reads and writes are unauthenticated."""

    # =========================================================================
    # Generic
    # =========================================================================

    async def list_items(self, resource: str, skip: int = 0, limit: int = 100) -> list:
        path, model = self._resource(resource)
        return await self._get(path, list[model], skip=skip, limit=limit)

    async def get_item(self, resource: str, item_id: str):
        path, model = self._resource(resource)
        return await self._get(f"{path}{item_id}", model)

    async def search_items(self, resource: str, text: str, limit: int = 10) -> list[SearchResultItem]:
        """Partial-name search: GET /{resource}/?search=<text>&limit=<n>."""
        if resource not in SEARCHABLE:
            raise ValueError(f"Resource {resource!r} does not support search")
        path, _ = self._resource(resource)
        return await self._get(path, list[SearchResultItem], search=text, limit=limit)

    def _resource(self, resource: str):
        try:
            return RESOURCES[resource]
        except KeyError:
            raise ValueError(
                f"Unknown resource {resource!r}. Choose from: {', '.join(RESOURCES)}"
            ) from None

    async def _create(self, resource: str, payload: dict):
        path, model = self._resource(resource)
        item = await self._send(path, "POST", payload, model, auth=False)
        logger.info("Created %s entry", resource)
        return item

    # =========================================================================
    # Typed helpers
    # =========================================================================

    async def list_skills(self, skip: int = 0, limit: int = 100) -> list[Skill]:
        return await self.list_items("skills", skip, limit)

    async def get_skill(self, skill_id: str) -> Skill:
        return await self.get_item("skills", skill_id)

    async def create_skill(self, skill: SkillCreate) -> Skill:
        return await self._create("skills", skill.to_payload())

    async def search_skills(self, text: str, limit: int = 10) -> list[SearchResultItem]:
        return await self.search_items("skills", text, limit)

    async def list_certifications(self, skip: int = 0, limit: int = 100) -> list[Certification]:
        return await self.list_items("certifications", skip, limit)

    async def get_certification(self, cert_id: str) -> Certification:
        return await self.get_item("certifications", cert_id)

    async def create_certification(self, cert: CertificationCreate) -> Certification:
        return await self._create("certifications", cert.to_payload())

    async def search_certifications(self, text: str, limit: int = 10) -> list[SearchResultItem]:
        return await self.search_items("certifications", text, limit)

    async def list_projects(self, skip: int = 0, limit: int = 100) -> list[Project]:
        return await self.list_items("projects", skip, limit)

    async def get_project(self, project_id: str) -> Project:
        return await self.get_item("projects", project_id)

    async def create_project(self, project: ProjectCreate) -> Project:
        return await self._create("projects", project.to_payload())

    async def search_projects(self, text: str, limit: int = 10) -> list[SearchResultItem]:
        return await self.search_items("projects", text, limit)

    async def list_job_descriptions(self, skip: int = 0, limit: int = 100) -> list[JobDescription]:
        return await self.list_items("job-descriptions", skip, limit)

    async def get_job_description(self, jd_id: str) -> JobDescription:
        return await self.get_item("job-descriptions", jd_id)

    async def create_job_description(self, jd: JobDescriptionCreate) -> JobDescription:
        return await self._create("job-descriptions", jd.to_payload())

    async def list_resumes(self, skip: int = 0, limit: int = 100) -> list[Resume]:
        return await self.list_items("resumes", skip, limit)

    async def get_resume(self, resume_id: str) -> Resume:
        return await self.get_item("resumes", resume_id)

    async def create_resume(self, resume: ResumeCreate) -> Resume:
        return await self._create("resumes", resume.to_payload())
