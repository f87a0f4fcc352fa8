"""
Authentication API routes, one router per role:
/api/admin-auth, /api/sales-auth, /api/worker-auth, /api/customer-auth.
"""
from typing import Type

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel
from sqlmodel.ext.asyncio.session import AsyncSession

from kvb_crm.config import settings
from kvb_crm.database import get_session
from kvb_crm.core.security import ROLE_COOKIES, Role, cookie_max_age
from kvb_crm.services.auth_service import AuthService, RESETTABLE_ROLES
from kvb_crm.schemas.auth import (
    LoginRequest, AdminSignupRequest, SalesSignupRequest, WorkerSignupRequest,
    CustomerSignupRequest, PrincipalResponse, PasswordResetRequest, PasswordResetConfirm
)
from kvb_crm.schemas.common import MessageResponse


def set_auth_cookie(response: Response, role: Role, token: str) -> None:
    response.set_cookie(
        key=ROLE_COOKIES[role],
        value=token,
        max_age=cookie_max_age(),
        httponly=True,
        samesite="strict",
        secure=not settings.DEV_MODE
    )


def clear_auth_cookie(response: Response, role: Role) -> None:
    response.delete_cookie(
        key=ROLE_COOKIES[role],
        httponly=True,
        samesite="strict",
        secure=not settings.DEV_MODE
    )


def build_auth_router(role: Role, signup_schema: Type[BaseModel]) -> APIRouter:
    """Signup, login and logout for one role; password reset for staff roles."""
    router = APIRouter(prefix=f"/api/{role}-auth", tags=[f"{role}-auth"])

    @router.post("/signup", response_model=PrincipalResponse, status_code=201)
    async def signup(
        request: signup_schema,
        response: Response,
        session: AsyncSession = Depends(get_session)
    ):
        """Create an account and sign it in."""
        principal, token = await AuthService(session, role).signup(request.model_dump())
        set_auth_cookie(response, role, token)
        return principal

    @router.post("/login", response_model=PrincipalResponse)
    async def login(
        request: LoginRequest,
        response: Response,
        session: AsyncSession = Depends(get_session)
    ):
        """Check credentials and set the role cookie."""
        principal, token = await AuthService(session, role).login(request.email, request.password)
        set_auth_cookie(response, role, token)
        return principal

    @router.post("/logout", response_model=MessageResponse)
    async def logout(response: Response):
        clear_auth_cookie(response, role)
        return {"message": "Logged out successfully"}

    if role in RESETTABLE_ROLES:

        @router.post("/forgot-password")
        async def forgot_password(
            request: PasswordResetRequest,
            session: AsyncSession = Depends(get_session)
        ):
            """Issue a reset token (returned directly in DEV_MODE)."""
            return await AuthService(session, role).forgot_password(request.email)

        @router.put("/reset-password/{token}", response_model=MessageResponse)
        async def reset_password(
            token: str,
            request: PasswordResetConfirm,
            session: AsyncSession = Depends(get_session)
        ):
            return await AuthService(session, role).reset_password(token, request.password)

    return router


admin_auth_router = build_auth_router("admin", AdminSignupRequest)
sales_auth_router = build_auth_router("sales", SalesSignupRequest)
worker_auth_router = build_auth_router("worker", WorkerSignupRequest)
customer_auth_router = build_auth_router("customer", CustomerSignupRequest)
