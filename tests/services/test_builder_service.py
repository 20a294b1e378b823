"""Tests for BuilderService."""

import asyncio

import httpx
import pytest

from api_client import ApiClient, RequestError
from services import BuilderService
from services.exceptions import NotAuthenticatedError, ValidationError
from services.models import (
    CandidateCertificationCreate,
    CandidateProjectCreate,
    CandidateSkillCreate,
    ProfileSnapshot,
    WorkExperienceCreate,
)


class TestLoadProfile:
    async def test_empty_profile(self, builder_service, signed_in):
        snapshot = await builder_service.load_profile()
        assert snapshot == ProfileSnapshot()

    async def test_requires_session(self, builder_service):
        with pytest.raises(NotAuthenticatedError):
            await builder_service.load_profile()


class TestWorkExperience:
    async def test_create_update_delete(self, builder_service, signed_in):
        created = await builder_service.create_work_experience(
            WorkExperienceCreate(
                company="Acme", role="Engineer", start_date="2021-02-01", location=" "
            )
        )
        assert created.company == "Acme"
        assert created.location is None

        updated = await builder_service.update_work_experience(
            created.work_exp_id,
            WorkExperienceCreate(company="Acme", role="Senior Engineer"),
        )
        assert updated.role == "Senior Engineer"
        assert [e.role for e in await builder_service.list_work_experience()] == [
            "Senior Engineer"
        ]

        await builder_service.delete_work_experience(created.work_exp_id)
        assert await builder_service.list_work_experience() == []

    async def test_blank_company_is_rejected(self, builder_service, signed_in, backend):
        with pytest.raises(ValidationError) as exc_info:
            await builder_service.create_work_experience(
                WorkExperienceCreate(company="  ", role="Engineer")
            )
        assert exc_info.value.field == "company"
        assert backend.requests == []

    async def test_delete_missing(self, builder_service, signed_in):
        with pytest.raises(RequestError, match="Work experience not found"):
            await builder_service.delete_work_experience("w999")


class TestAssociations:
    async def test_skill(self, builder_service, signed_in, backend):
        added = await builder_service.add_skill(CandidateSkillCreate(skill_id="s3", level=5))
        assert added.skill_name == "Python"
        assert backend.requests[-1] == ("POST", "/candidate-skills/", {"skill_id": "s3", "level": 5})

        assert [s.skill_id for s in await builder_service.list_skills()] == ["s3"]
        await builder_service.remove_skill("s3")
        assert await builder_service.list_skills() == []

    async def test_unknown_skill(self, builder_service, signed_in):
        with pytest.raises(RequestError) as exc_info:
            await builder_service.add_skill(CandidateSkillCreate(skill_id="s404"))
        assert exc_info.value.status_code == 404

    async def test_certification(self, builder_service, signed_in):
        added = await builder_service.add_certification(
            CandidateCertificationCreate(cert_id="c1", credential_id="ABC-123")
        )
        assert added.cert_name == "AWS Solutions Architect"
        assert added.credential_id == "ABC-123"
        await builder_service.remove_certification("c1")
        assert await builder_service.list_certifications() == []

    async def test_project(self, builder_service, signed_in):
        await builder_service.add_project(
            CandidateProjectCreate(project_id="p1", start_date="2023-01-01")
        )
        snapshot = await builder_service.load_profile()
        assert [p.project_name for p in snapshot.projects] == ["Resume Parser"]
        assert snapshot.projects[0].start_date == "2023-01-01"


class TestLoadProfileFailure:
    """A failing collection cancels the other in-flight fetches."""

    async def test_siblings_are_cancelled(self, test_config, session_store, signed_in):
        cancelled = []

        async def handler(request):
            if request.url.path == "/work-experience/me":
                await asyncio.sleep(0.01)
                return httpx.Response(500, json={"detail": "boom"})
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                cancelled.append(request.url.path)
                raise
            return httpx.Response(200, json=[])

        client = ApiClient("http://backend.test", transport=httpx.MockTransport(handler))
        service = BuilderService(config=test_config, client=client, sessions=session_store)

        with pytest.raises(RequestError, match="boom"):
            await service.load_profile()
        await client.aclose()

        assert sorted(cancelled) == [
            "/candidate-certifications/me",
            "/candidate-projects/me",
            "/candidate-skills/me",
        ]
