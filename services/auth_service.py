"""Auth service - credentials sign-in, registration and sign-out.

Sign-in exchanges email/password for an access token, then fetches the
user record with that token. The resulting session is persisted by the
SessionStore and expires with the backend token.
"""

import logging
import time

from api_client import RequestError
from config_loader import get_session_max_age

from .base_service import BaseService
from .exceptions import AuthenticationFailedError, ValidationError
from .models import Session, SignUpForm

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


class AuthService(BaseService):
    """Service for the credentials session."""

    async def sign_in(self, email: str, password: str) -> Session:
        """Sign in and persist the session.

        Raises:
            ValidationError: If email or password is missing.
            AuthenticationFailedError: If the backend rejects either step.
        """
        if not email or not password:
            raise ValidationError("Email and password required")

        try:
            data = await self.client.call(
                "/auth/login/json",
                method="POST",
                body={"email": email, "password": password},
            )
        except RequestError as e:
            logger.warning("Sign-in rejected for %s: %s", email, e)
            raise AuthenticationFailedError("Invalid credentials") from e

        token = (data or {}).get("access_token")
        if not token:
            raise AuthenticationFailedError("Invalid credentials")

        try:
            user = await self.client.call("/auth/me", token=token)
        except RequestError as e:
            raise AuthenticationFailedError("Failed to fetch user data") from e

        session = Session(
            access_token=token,
            user_id=user["id"],
            email=user.get("email", email),
            name=user.get("full_name"),
            expires_at=time.time() + get_session_max_age(self.config),
        )
        self.sessions.save(session)
        logger.info("Signed in as %s", session.email)
        return session

    async def sign_up(self, form: SignUpForm) -> Session:
        """Register a new account, then sign in with it.

        Raises:
            ValidationError: If the passwords differ or are too short.
            AuthenticationFailedError: If registration is rejected.
        """
        if form.password != form.confirm_password:
            raise ValidationError("Passwords do not match", field="confirm_password")
        if len(form.password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
                field="password",
            )

        try:
            await self.client.call(
                "/auth/register",
                method="POST",
                body=form.to_registration().to_payload(),
            )
        except RequestError as e:
            raise AuthenticationFailedError(e.message or "Registration failed") from e

        logger.info("Registered %s", form.email)
        return await self.sign_in(form.email, form.password)

    def sign_out(self) -> None:
        self.sessions.clear()
        logger.info("Signed out")

    def current_session(self) -> Session | None:
        """Get the live session, or None if signed out or expired."""
        return self.sessions.current()
