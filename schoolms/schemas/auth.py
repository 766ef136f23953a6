from pydantic import BaseModel, field_validator

from schoolms.models.user import UserType


class LoginRequest(BaseModel):
    username: str
    password: str
    # role picked on the login screen; checked against the account when given
    user_type: UserType | None = None

    @field_validator("user_type", mode="before")
    @classmethod
    def _lower_user_type(cls, v):
        return v.lower() if isinstance(v, str) else v


class UsernameAvailability(BaseModel):
    username: str
    available: bool
