"""Domain models for the governance engine.

Immutable value objects and aggregates. Every change returns a new
instance; stores persist them with compare-and-swap on `version`.
"""

from src.domain.models.action import Action, ActionState, ExecutionStatus
from src.domain.models.election import (
    Ballot,
    Candidate,
    CandidateTotal,
    Election,
    ElectionPhase,
    TallyResult,
)
from src.domain.models.member import Member, TeamPolicy
from src.domain.models.role import (
    DEFAULT_ROLE_CATALOG,
    Permission,
    Role,
    RoleCatalog,
)

__all__: list[str] = [
    "Action",
    "ActionState",
    "ExecutionStatus",
    "Ballot",
    "Candidate",
    "CandidateTotal",
    "Election",
    "ElectionPhase",
    "TallyResult",
    "Member",
    "TeamPolicy",
    "DEFAULT_ROLE_CATALOG",
    "Permission",
    "Role",
    "RoleCatalog",
]
