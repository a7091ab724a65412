# quotation_backend/routers/auth_router.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from quotation_backend.core.db import get_db
from quotation_backend.schemas.response_schemas import ResponseMessage
from quotation_backend.schemas.user_schemas import UserLogin, TokenResponse
from quotation_backend.services.auth_service import authenticate_user, issue_access_token, logout_user
from quotation_backend.utils.get_user import get_current_user

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/login", response_model=TokenResponse)
async def login(data: UserLogin, db: AsyncSession = Depends(get_db)):
    user = await authenticate_user(db, data.username, data.password)
    access_token = await issue_access_token(db, user)
    return TokenResponse(access_token=access_token)


@router.post("/logout", response_model=ResponseMessage)
async def logout(db: AsyncSession = Depends(get_db), current_user=Depends(get_current_user)):
    """Logs the user out everywhere by bumping their token version."""
    await logout_user(db, current_user)
    return ResponseMessage(message="Logged out successfully")
