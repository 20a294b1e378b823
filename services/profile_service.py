"""Profile service - candidate account management."""

import logging

from .base_service import BaseService
from .exceptions import ValidationError
from .models import Candidate, CandidateCreate, CandidateUpdate

logger = logging.getLogger(__name__)


class ProfileService(BaseService):
    """Service for the candidate profile.

    Handles the signed-in candidate ("me") and lookups by ID.
    """

    async def get_me(self) -> Candidate:
        """Get the signed-in candidate's profile.

        Raises:
            NotAuthenticatedError: If no session is active.
            RequestError: If the backend rejects the call.
        """
        return await self._get("/candidates/me", Candidate, auth=True)

    async def update_me(self, update: CandidateUpdate) -> Candidate:
        """Update the signed-in candidate. Only fields that are set are sent.

        Raises:
            ValidationError: If the update carries no fields.
        """
        payload = update.to_payload()
        if not payload:
            raise ValidationError("Nothing to update")

        candidate = await self._send("/candidates/me", "PUT", payload, Candidate)
        logger.info("Updated profile for %s", candidate.email)
        return candidate

    async def delete_me(self) -> None:
        """Delete the signed-in candidate's account and end the session."""
        await self._send("/candidates/me", "DELETE")
        self.sessions.clear()
        logger.info("Account deleted")

    async def get_candidate(self, candidate_id: str) -> Candidate:
        """Get a candidate by ID (backend enforces ownership)."""
        return await self._get(f"/candidates/{candidate_id}", Candidate, auth=True)

    async def create_candidate(self, candidate: CandidateCreate) -> Candidate:
        """Create a candidate profile without signing in."""
        if not candidate.full_name.strip():
            raise ValidationError("Full name is required", field="full_name")
        if not candidate.email.strip():
            raise ValidationError("Email is required", field="email")

        return await self._send(
            "/candidates/", "POST", candidate.to_payload(), Candidate, auth=False
        )
