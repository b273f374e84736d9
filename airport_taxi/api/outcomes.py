"""Translate lifecycle ``OperationResult`` values into HTTP errors."""

from fastapi import HTTPException

from airport_taxi.domain.results import OperationResult, Outcome

STATUS_CODES: dict[Outcome, int] = {
    Outcome.OK: 200,
    Outcome.ALREADY_PROCESSED: 409,
    Outcome.INVALID_TRANSITION: 409,
    Outcome.UNAUTHORIZED: 403,
    Outcome.NOT_FOUND: 404,
    Outcome.VALIDATION_FAILURE: 400,
}


def ensure_ok(result: OperationResult) -> OperationResult:
    """Return *result* if it succeeded, otherwise raise the matching HTTPException."""
    if result.ok:
        return result
    detail: dict = {"error": result.detail, "outcome": result.outcome.value}
    if result.status is not None:
        detail["status"] = result.status.value
    raise HTTPException(status_code=STATUS_CODES[result.outcome], detail=detail)
