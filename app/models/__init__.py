from app.models.spend import SpendRecord, CloudProvider
from app.models.savings import SavingIdea, SavingStatus
from app.models.user import User, UserRole

__all__ = ["SpendRecord", "CloudProvider", "SavingIdea", "SavingStatus", "User", "UserRole"]
