from pydantic import BaseModel

from schoolms.schemas.user import UserRecord


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserRecord
    message: str
