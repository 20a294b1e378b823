"""Profile builder service - the signed-in candidate's collections.

Work experience entries are owned outright; skills, certifications and
projects are associations to catalog entries carrying extra fields
(proficiency level, credential ID, date range).
"""

import asyncio
import logging

from .base_service import BaseService
from .exceptions import ValidationError
from .models import (
    CandidateCertification,
    CandidateCertificationCreate,
    CandidateProject,
    CandidateProjectCreate,
    CandidateSkill,
    CandidateSkillCreate,
    ProfileSnapshot,
    WorkExperience,
    WorkExperienceCreate,
)

logger = logging.getLogger(__name__)


class BuilderService(BaseService):
    """Service behind the profile builder. Every call is authenticated."""

    async def load_profile(self) -> ProfileSnapshot:
        """Fetch all four builder collections concurrently.

        If any fetch fails, the others are cancelled before the error propagates.
        """
        tasks = [
            asyncio.ensure_future(self.list_work_experience()),
            asyncio.ensure_future(self.list_skills()),
            asyncio.ensure_future(self.list_certifications()),
            asyncio.ensure_future(self.list_projects()),
        ]
        try:
            experience, skills, certifications, projects = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        return ProfileSnapshot(
            work_experience=experience,
            skills=skills,
            certifications=certifications,
            projects=projects,
        )

    # =========================================================================
    # Work experience
    # =========================================================================

    async def list_work_experience(self) -> list[WorkExperience]:
        return await self._get("/work-experience/me", list[WorkExperience], auth=True)

    async def create_work_experience(self, entry: WorkExperienceCreate) -> WorkExperience:
        _require_text(entry.company, "company", "Company is required")
        _require_text(entry.role, "role", "Role is required")
        created = await self._send(
            "/work-experience/", "POST", entry.to_payload(), WorkExperience
        )
        logger.info("Added work experience %s at %s", created.role, created.company)
        return created

    async def update_work_experience(
        self, work_exp_id: str, entry: WorkExperienceCreate
    ) -> WorkExperience:
        _require_text(entry.company, "company", "Company is required")
        _require_text(entry.role, "role", "Role is required")
        return await self._send(
            f"/work-experience/{work_exp_id}", "PUT", entry.to_payload(), WorkExperience
        )

    async def delete_work_experience(self, work_exp_id: str) -> None:
        await self._send(f"/work-experience/{work_exp_id}", "DELETE")
        logger.info("Deleted work experience %s", work_exp_id)

    # =========================================================================
    # Skills
    # =========================================================================

    async def list_skills(self) -> list[CandidateSkill]:
        return await self._get("/candidate-skills/me", list[CandidateSkill], auth=True)

    async def add_skill(self, data: CandidateSkillCreate) -> CandidateSkill:
        return await self._send(
            "/candidate-skills/", "POST", data.to_payload(), CandidateSkill
        )

    async def remove_skill(self, skill_id: str) -> None:
        await self._send(f"/candidate-skills/{skill_id}", "DELETE")

    # =========================================================================
    # Certifications
    # =========================================================================

    async def list_certifications(self) -> list[CandidateCertification]:
        return await self._get(
            "/candidate-certifications/me", list[CandidateCertification], auth=True
        )

    async def add_certification(
        self, data: CandidateCertificationCreate
    ) -> CandidateCertification:
        return await self._send(
            "/candidate-certifications/", "POST", data.to_payload(), CandidateCertification
        )

    async def remove_certification(self, cert_id: str) -> None:
        await self._send(f"/candidate-certifications/{cert_id}", "DELETE")

    # =========================================================================
    # Projects
    # =========================================================================

    async def list_projects(self) -> list[CandidateProject]:
        return await self._get("/candidate-projects/me", list[CandidateProject], auth=True)

    async def add_project(self, data: CandidateProjectCreate) -> CandidateProject:
        return await self._send(
            "/candidate-projects/", "POST", data.to_payload(), CandidateProject
        )

    async def remove_project(self, project_id: str) -> None:
        await self._send(f"/candidate-projects/{project_id}", "DELETE")


def _require_text(value: str | None, field: str, message: str) -> None:
    if not value or not value.strip():
        raise ValidationError(message, field=field)
