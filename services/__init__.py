"""CV Tailor services - framework-agnostic client logic layer.

Services wrap the backend REST API and return structured data (Pydantic
models). No Rich imports, no console output. Callers handle presentation.
"""

from .base_service import BaseService
from .exceptions import (
    CvTailorError,
    ValidationError,
    NotAuthenticatedError,
    AuthenticationFailedError,
)
from .session_store import SessionStore
from .auth_service import AuthService
from .profile_service import ProfileService
from .catalog_service import CatalogService
from .builder_service import BuilderService
from .forms import (
    SkillForm,
    CertificationForm,
    ProjectForm,
    WorkExperienceForm,
)

__all__ = [
    # Base
    "BaseService",
    "SessionStore",
    # Services
    "AuthService",
    "ProfileService",
    "CatalogService",
    "BuilderService",
    # Forms
    "SkillForm",
    "CertificationForm",
    "ProjectForm",
    "WorkExperienceForm",
    # Exceptions
    "CvTailorError",
    "ValidationError",
    "NotAuthenticatedError",
    "AuthenticationFailedError",
]
