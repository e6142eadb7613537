"""GovernanceFailure -> RFC 7807 problem+json rendering for FastAPI.

Usage:
    app = FastAPI()
    register_governance_error_handlers(app)
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from structlog import get_logger

from src.api.models.governance import GovernanceErrorResponse
from src.application.services.governance_facade import ErrorKind, GovernanceFailure

logger = get_logger(__name__)

PROBLEM_CONTENT_TYPE = "application/problem+json"

# ErrorKind -> (HTTP status, title)
ERROR_STATUS: dict[ErrorKind, tuple[int, str]] = {
    ErrorKind.UNAUTHORIZED: (403, "Forbidden"),
    ErrorKind.NOT_FOUND: (404, "Not Found"),
    ErrorKind.INVALID_WINDOW: (422, "Invalid Election Window"),
    ErrorKind.WINDOW_CLOSED: (409, "Election Window Closed"),
    ErrorKind.INVALID_CHOICE: (422, "Invalid Ballot Choice"),
    ErrorKind.DUPLICATE_APPROVAL: (409, "Duplicate Approval"),
    ErrorKind.ALREADY_EXECUTED: (409, "Action Already Executed"),
    ErrorKind.ALREADY_WITHDRAWN: (409, "Action Already Withdrawn"),
    ErrorKind.INSUFFICIENT_APPROVALS: (409, "Insufficient Approvals"),
    ErrorKind.EXTERNAL_EXECUTION_FAILED: (502, "External Execution Failed"),
    ErrorKind.EXTERNAL_EXECUTION_TIMEOUT: (504, "External Execution Timeout"),
    ErrorKind.QUORUM_REACHED: (409, "Approval Quorum Reached"),
    ErrorKind.ELECTION_NOT_CLOSED: (409, "Election Not Closed"),
    ErrorKind.EXECUTION_NOT_AWAITING_REVIEW: (409, "Execution Not Awaiting Review"),
    ErrorKind.INVALID_ARGUMENT: (400, "Bad Request"),
    ErrorKind.CONFLICT: (409, "Conflict"),
}


def problem_for(failure: GovernanceFailure, instance: str) -> GovernanceErrorResponse:
    """Build the RFC 7807 document for a failure."""
    status, title = ERROR_STATUS.get(failure.kind, (500, "Internal Server Error"))
    return GovernanceErrorResponse(
        type=f"urn:governance:{failure.kind.value.replace('_', '-')}",
        title=title,
        status=status,
        detail=failure.message,
        instance=instance,
        kind=failure.kind.value,
        operation=failure.operation,
    )


async def governance_failure_handler(
    request: Request, exc: GovernanceFailure
) -> JSONResponse:
    """FastAPI exception handler for GovernanceFailure."""
    problem = problem_for(exc, str(request.url.path))
    log = logger.bind(kind=problem.kind, status=problem.status, instance=problem.instance)
    if problem.status >= 500:
        log.error("Governance request failed", detail=problem.detail)
    else:
        log.info("Governance request rejected", detail=problem.detail)
    return JSONResponse(
        status_code=problem.status,
        content=problem.model_dump(),
        media_type=PROBLEM_CONTENT_TYPE,
    )


def register_governance_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(GovernanceFailure, governance_failure_handler)  # type: ignore[arg-type]
