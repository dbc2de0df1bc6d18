from typing import List

from pydantic import BaseModel, EmailStr, Field

from modular_house.schemas.common import CamelModel


class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserOut(CamelModel):
    id: str
    email: EmailStr
    roles: List[str]


class LoginResponse(CamelModel):
    token: str
    user: UserOut


class TokenPayload(CamelModel):
    user_id: str
    email: str
    roles: List[str] = []
