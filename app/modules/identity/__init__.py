from .domain.service import IdentityService

__all__ = ["IdentityService"]
