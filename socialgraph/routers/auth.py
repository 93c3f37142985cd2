"""
Account endpoints:
  POST /auth/register — create an account, returns a bearer token
  POST /auth/login    — exchange credentials for a bearer token
  POST /auth/logout   — revoke the presented token
  GET  /auth/activate — activate an account from its activation token
"""
import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from socialgraph.dependencies import Principal, current_user, get_account_service
from socialgraph.schemas import AuthResponse, LoginRequest, RegisterRequest
from socialgraph.services.accounts import AccountService

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/register", response_model=AuthResponse)
async def register(body: RegisterRequest, accounts: AccountService = Depends(get_account_service)):
    return await accounts.register(body.username, body.password, body.email, body.fullname)


@router.post("/login", response_model=AuthResponse)
async def login(body: LoginRequest, accounts: AccountService = Depends(get_account_service)):
    return await accounts.login(body.username, body.password)


@router.post("/logout")
async def logout(
    principal: Principal = Depends(current_user),
    accounts: AccountService = Depends(get_account_service),
):
    await accounts.logout(principal.token)
    return {"message": "Logged out successfully"}


@router.get("/activate")
async def activate(
    token: str = Query(..., min_length=1),
    accounts: AccountService = Depends(get_account_service),
):
    if await accounts.activate(token):
        return {"activated": True}
    return JSONResponse(status_code=400, content={"activated": False})
