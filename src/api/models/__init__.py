"""
API models (Pydantic DTOs) for the governance engine.
"""

from src.api.models.governance import (
    ActionResponse,
    ApprovalResponse,
    BallotResponse,
    CandidateTotalResponse,
    ElectionResponse,
    GovernanceErrorResponse,
    TallyResponse,
)

__all__: list[str] = [
    "ActionResponse",
    "ApprovalResponse",
    "BallotResponse",
    "CandidateTotalResponse",
    "ElectionResponse",
    "GovernanceErrorResponse",
    "TallyResponse",
]
