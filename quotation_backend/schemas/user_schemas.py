# quotation_backend/schemas/user_schemas.py
from pydantic import BaseModel


class UserLogin(BaseModel):
    username: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
