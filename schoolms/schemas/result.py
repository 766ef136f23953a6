import enum

from pydantic import BaseModel


class FailureReason(str, enum.Enum):
    DUPLICATE = "duplicate"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    INVALID = "invalid"
    FULL = "full"
    ERROR = "error"


class ActionResult(BaseModel):
    """
    Outcome of a mutating data-access call.

    Truthy exactly when the operation committed, so callers that only care
    about success can keep writing ``if enroll_in_course(...):``.
    """

    ok: bool
    message: str
    reason: FailureReason | None = None

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls, message: str) -> "ActionResult":
        return cls(ok=True, message=message)

    @classmethod
    def failure(cls, reason: FailureReason, message: str) -> "ActionResult":
        return cls(ok=False, message=message, reason=reason)
