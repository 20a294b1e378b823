"""Tests for the profile builder forms."""

import asyncio

import pytest

from config_loader import get_search_settings
from search_selector import SelectorState
from services.exceptions import ValidationError
from services.forms import build_payload
from services.models import CandidateSkillCreate
from services import CertificationForm, ProjectForm, SkillForm, WorkExperienceForm


@pytest.fixture
def settings(test_config):
    return get_search_settings(test_config)


@pytest.fixture
async def skill_form(catalog_service, builder_service, settings):
    form = SkillForm(catalog_service, builder_service, settings)
    yield form
    await form.aclose()


async def settle(selector):
    await asyncio.wait_for(selector.wait_settled(), timeout=2)


class TestAddSkillEndToEnd:
    """Typing, picking and submitting a skill against the backend."""

    async def test_type_select_submit(self, skill_form, backend, signed_in):
        for text in ("j", "ja", "jav"):
            skill_form.selector.set_query(text)
        await settle(skill_form.selector)

        assert backend.search_log == [("skills", "jav")]
        assert [r.display_name for r in skill_form.selector.results] == ["Java", "JavaScript"]
        assert skill_form.selector.is_open

        skill_form.selector.select("s2")
        assert skill_form.selector.query == "JavaScript"
        assert not skill_form.selector.is_open

        skill_form.level = 4
        added = await skill_form.submit()

        assert backend.requests[-1] == (
            "POST",
            "/candidate-skills/",
            {"skill_id": "s2", "level": 4},
        )
        assert added.skill_name == "JavaScript"

    async def test_submit_without_selection(self, skill_form, backend, signed_in):
        skill_form.selector.set_query("jav")
        await settle(skill_form.selector)

        with pytest.raises(ValidationError, match="Please select a skill"):
            await skill_form.submit()
        assert not any(path == "/candidate-skills/" for _, path, _ in backend.requests)

    async def test_editing_after_select_blocks_submit(self, skill_form, signed_in):
        skill_form.selector.set_query("jav")
        await settle(skill_form.selector)
        skill_form.selector.select("s1")

        skill_form.selector.set_query("Jav")
        with pytest.raises(ValidationError):
            await skill_form.submit()

    async def test_level_out_of_range(self, skill_form, signed_in):
        skill_form.selector.set_query("pyt")
        await settle(skill_form.selector)
        skill_form.selector.select("s3")
        skill_form.level = 9

        with pytest.raises(ValidationError, match="level"):
            await skill_form.submit()

    async def test_short_query_never_searches(self, skill_form, backend):
        skill_form.selector.set_query("j")
        await asyncio.sleep(0.05)
        assert backend.search_log == []
        assert skill_form.selector.state is SelectorState.IDLE


class TestOtherPickers:
    async def test_certification(self, catalog_service, builder_service, settings, backend, signed_in):
        form = CertificationForm(
            catalog_service, builder_service, settings, credential_id="K-42", issue_date="2024-05-01"
        )
        form.selector.set_query("certified")
        await settle(form.selector)
        form.selector.select("c2")

        added = await form.submit()
        await form.aclose()

        assert backend.search_log == [("certifications", "certified")]
        assert added.cert_name == "Certified Kubernetes Administrator"
        assert backend.requests[-1][2] == {
            "cert_id": "c2",
            "credential_id": "K-42",
            "issue_date": "2024-05-01",
        }

    async def test_project(self, catalog_service, builder_service, settings, signed_in):
        form = ProjectForm(catalog_service, builder_service, settings, end_date="2024-12-31")
        form.selector.set_query("parser")
        await settle(form.selector)
        form.selector.select("p1")

        added = await form.submit()
        await form.aclose()
        assert added.project_name == "Resume Parser"
        assert added.end_date == "2024-12-31"

    async def test_bad_date(self, catalog_service, builder_service, settings, signed_in):
        form = ProjectForm(catalog_service, builder_service, settings, start_date="next spring")
        form.selector.set_query("parser")
        await settle(form.selector)
        form.selector.select("p1")

        with pytest.raises(ValidationError) as exc_info:
            await form.submit()
        await form.aclose()
        assert exc_info.value.field == "start_date"


class TestWorkExperienceForm:
    async def test_create(self, builder_service, signed_in):
        form = WorkExperienceForm(builder_service, company=" Acme ", role="Engineer")
        created = await form.submit()
        assert created.company == "Acme"

    async def test_requires_role(self, builder_service, signed_in, backend):
        form = WorkExperienceForm(builder_service, company="Acme", role="")
        with pytest.raises(ValidationError, match="Role is required"):
            await form.submit()
        assert backend.requests == []

    async def test_edit_keeps_unchanged_fields(self, builder_service, signed_in):
        created = await WorkExperienceForm(
            builder_service, company="Acme", role="Engineer", location="Berlin"
        ).submit()

        form = WorkExperienceForm(builder_service, editing=created, role="Lead Engineer")
        updated = await form.submit()

        assert updated.work_exp_id == created.work_exp_id
        assert updated.role == "Lead Engineer"
        assert updated.location == "Berlin"


class TestBuildPayload:
    def test_reports_field(self):
        with pytest.raises(ValidationError) as exc_info:
            build_payload(CandidateSkillCreate, skill_id="s1", years_experience=-1)
        assert exc_info.value.field == "years_experience"

    def test_valid(self):
        assert build_payload(CandidateSkillCreate, skill_id=3).skill_id == "3"
