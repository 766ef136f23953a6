from fastapi import HTTPException, status

from schoolms.schemas.result import ActionResult, FailureReason

_STATUS_BY_REASON = {
    FailureReason.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    FailureReason.DUPLICATE: status.HTTP_409_CONFLICT,
    FailureReason.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    FailureReason.INVALID: status.HTTP_400_BAD_REQUEST,
    FailureReason.FULL: status.HTTP_400_BAD_REQUEST,
    FailureReason.ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def ensure_ok(result: ActionResult) -> ActionResult:
    """Pass a successful result through; turn a failure into an HTTP error."""
    if result:
        return result
    raise HTTPException(
        status_code=_STATUS_BY_REASON.get(
            result.reason, status.HTTP_500_INTERNAL_SERVER_ERROR
        ),
        detail=result.message,
    )
