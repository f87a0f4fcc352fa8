"""
API dependencies - shared across all routes.
Every role has its own cookie; a token is only accepted for the role it was
issued to.
"""
import uuid
from typing import Optional

from fastapi import Depends
from fastapi.security import APIKeyCookie
from sqlmodel.ext.asyncio.session import AsyncSession

from kvb_crm.database import get_session
from kvb_crm.core.security import ROLE_COOKIES, Role, verify_token
from kvb_crm.core.exceptions import raise_unauthorized, raise_forbidden
from kvb_crm.models.user import Admin, Sales, Worker, Customer, PrincipalBase
from kvb_crm.repositories.user_repo import get_principal_repository


admin_cookie = APIKeyCookie(name=ROLE_COOKIES["admin"], auto_error=False)
sales_cookie = APIKeyCookie(name=ROLE_COOKIES["sales"], auto_error=False)
worker_cookie = APIKeyCookie(name=ROLE_COOKIES["worker"], auto_error=False)
customer_cookie = APIKeyCookie(name=ROLE_COOKIES["customer"], auto_error=False)


async def load_principal(token: Optional[str], role: Role, session: AsyncSession) -> PrincipalBase:
    """Resolve a role cookie to its principal row."""
    if not token:
        raise_unauthorized("Unauthorized - No Token Provided")

    payload = verify_token(token, role)
    if not payload or not payload.get("user_id"):
        raise_unauthorized("Unauthorized - Invalid Token")

    try:
        principal_id = uuid.UUID(payload["user_id"])
    except ValueError:
        raise_unauthorized("Unauthorized - Invalid Token")

    principal = await get_principal_repository(role, session).get(principal_id)
    if not principal:
        raise_unauthorized("User not found")

    return principal


async def get_current_admin(
    token: Optional[str] = Depends(admin_cookie),
    session: AsyncSession = Depends(get_session)
) -> Admin:
    return await load_principal(token, "admin", session)


async def get_current_sales(
    token: Optional[str] = Depends(sales_cookie),
    session: AsyncSession = Depends(get_session)
) -> Sales:
    return await load_principal(token, "sales", session)


async def get_current_worker(
    token: Optional[str] = Depends(worker_cookie),
    session: AsyncSession = Depends(get_session)
) -> Worker:
    return await load_principal(token, "worker", session)


async def get_current_customer(
    token: Optional[str] = Depends(customer_cookie),
    session: AsyncSession = Depends(get_session)
) -> Customer:
    return await load_principal(token, "customer", session)


async def get_current_principal(
    admin_token: Optional[str] = Depends(admin_cookie),
    worker_token: Optional[str] = Depends(worker_cookie),
    customer_token: Optional[str] = Depends(customer_cookie),
    sales_token: Optional[str] = Depends(sales_cookie),
    session: AsyncSession = Depends(get_session)
) -> PrincipalBase:
    """Any signed-in principal. The first cookie present decides the role."""
    candidates = (
        ("admin", admin_token),
        ("worker", worker_token),
        ("customer", customer_token),
        ("sales", sales_token),
    )
    for role, token in candidates:
        if token:
            return await load_principal(token, role, session)

    raise_unauthorized("Unauthorized - No Token Provided")


def require_roles(*roles: Role):
    """Dependency factory: the signed-in principal must have one of `roles`."""

    async def dependency(principal: PrincipalBase = Depends(get_current_principal)) -> PrincipalBase:
        if principal.role not in roles:
            raise_forbidden(f"Access denied. Requires one of these roles: {', '.join(roles)}")
        return principal

    return dependency
