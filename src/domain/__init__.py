"""
Domain layer - Pure governance logic.

This layer contains:
- Domain models (Member, Role, Action, Election, Ballot, TallyResult)
- Domain events (governance state changes)
- Domain exceptions

CRITICAL: This layer must NOT import from application, infrastructure, or api.
"""

from src.domain.exceptions import GovernanceError
from src.domain.models import Action, Election, Member, Permission, Role

__all__: list[str] = [
    "GovernanceError",
    "Action",
    "Election",
    "Member",
    "Permission",
    "Role",
]
