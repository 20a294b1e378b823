"""Tests for ProfileService."""

import pytest

from api_client import RequestError
from services.exceptions import NotAuthenticatedError, ValidationError
from services.models import Candidate, CandidateCreate, CandidateUpdate


class TestGetMe:
    async def test_requires_session(self, profile_service, backend):
        with pytest.raises(NotAuthenticatedError):
            await profile_service.get_me()
        assert backend.requests == []

    async def test_returns_candidate(self, profile_service, signed_in, jane):
        me = await profile_service.get_me()
        assert isinstance(me, Candidate)
        assert me.id == jane["id"]
        assert me.full_name == "Jane Doe"


class TestUpdateMe:
    async def test_only_set_fields_are_sent(self, profile_service, signed_in, backend):
        update = CandidateUpdate(phone="555-0100", github="github.com/jane", linkedin="  ")
        me = await profile_service.update_me(update)

        assert backend.requests[-1] == (
            "PUT",
            "/candidates/me",
            {"phone": "555-0100", "github": "https://github.com/jane"},
        )
        assert me.github == "https://github.com/jane"
        assert me.full_name == "Jane Doe"

    async def test_empty_update(self, profile_service, signed_in, backend):
        with pytest.raises(ValidationError, match="Nothing to update"):
            await profile_service.update_me(CandidateUpdate(full_name=" "))
        assert backend.requests == []


class TestDeleteMe:
    async def test_deletes_account_and_session(
        self, profile_service, signed_in, session_store, backend, jane
    ):
        await profile_service.delete_me()
        assert jane["id"] not in backend.users
        assert session_store.load() is None


class TestCandidates:
    async def test_get_candidate(self, profile_service, signed_in, jane):
        candidate = await profile_service.get_candidate(jane["id"])
        assert candidate.email == "jane@example.com"

    async def test_get_unknown_candidate(self, profile_service, signed_in):
        with pytest.raises(RequestError) as exc_info:
            await profile_service.get_candidate("u999")
        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "Candidate not found"

    async def test_create_candidate_without_session(self, profile_service, backend):
        created = await profile_service.create_candidate(
            CandidateCreate(full_name="Lee Chen", email="lee@example.com", phone="")
        )
        assert created.email == "lee@example.com"
        assert backend.requests[-1] == (
            "POST",
            "/candidates/",
            {"full_name": "Lee Chen", "email": "lee@example.com"},
        )

    async def test_create_candidate_requires_name(self, profile_service):
        with pytest.raises(ValidationError) as exc_info:
            await profile_service.create_candidate(
                CandidateCreate(full_name="  ", email="lee@example.com")
            )
        assert exc_info.value.field == "full_name"
