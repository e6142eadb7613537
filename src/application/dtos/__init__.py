"""Application DTOs (Data Transfer Objects).

Returned by application services. They are distinct from domain models
(immutable business objects) and from API models (Pydantic models for
serialization); the API layer converts these into its response models.
"""

from src.application.dtos.governance import (
    ApprovalResult,
    BallotReceipt,
    ElectionSummary,
    ExecutionResult,
)

__all__: list[str] = [
    "ApprovalResult",
    "BallotReceipt",
    "ElectionSummary",
    "ExecutionResult",
]
