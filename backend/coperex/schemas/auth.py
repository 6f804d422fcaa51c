from pydantic import BaseModel

from coperex.schemas.user import UserOut


class LoginOut(BaseModel):
    success: bool = True
    message: str
    token: str
    token_type: str = "bearer"
    user: UserOut
