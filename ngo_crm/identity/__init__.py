from .identity_service import IdentityService
from .session import Session

__all__ = ["IdentityService", "Session"]
