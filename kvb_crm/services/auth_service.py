"""
Authentication service - signup, login and password reset for every role.
Each role lives in its own table and gets its own cookie.
"""
import logging
from typing import Tuple

from sqlmodel.ext.asyncio.session import AsyncSession

from kvb_crm.config import settings
from kvb_crm.core.security import (
    Role,
    get_password_hash,
    verify_password,
    create_access_token,
    generate_reset_token,
    hash_reset_token,
)
from kvb_crm.core.exceptions import (
    raise_bad_request,
    raise_not_found,
    raise_unauthorized,
)
from kvb_crm.models.notification import NotificationKinds
from kvb_crm.models.user import PrincipalBase
from kvb_crm.repositories.user_repo import get_principal_repository
from kvb_crm.services import email_templates
from kvb_crm.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6

# Roles that can reset a forgotten password
RESETTABLE_ROLES = ("admin", "sales", "worker")


def check_password_strength(password: str) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise_bad_request(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")


class AuthService:
    """Service for authentication operations of one role."""

    def __init__(self, session: AsyncSession, role: Role):
        self.session = session
        self.role = role
        self.repo = get_principal_repository(role, session)

    @property
    def label(self) -> str:
        return self.role.capitalize()

    async def signup(self, data: dict) -> Tuple[PrincipalBase, str]:
        """Create a principal and return it with a fresh access token."""
        check_password_strength(data["password"])

        existing = await self.repo.get_by_email(data["email"])
        if existing:
            raise_bad_request("Email already exists")

        data = dict(data)
        data["password_hash"] = get_password_hash(data.pop("password"))
        principal = await self.repo.create(data)

        logger.info(f"{self.label} signed up: {principal.email}")
        return principal, create_access_token(principal.id, self.role)

    async def login(self, email: str, password: str) -> Tuple[PrincipalBase, str]:
        """Verify credentials and return the principal with an access token."""
        principal = await self.repo.get_by_email(email)
        if not principal or not verify_password(password, principal.password_hash):
            raise_unauthorized("Invalid email or password")

        return principal, create_access_token(principal.id, self.role)

    async def forgot_password(self, email: str) -> dict:
        """
        Store a hashed reset token valid for a few minutes.
        In DEV_MODE the raw token is returned, otherwise it is emailed.
        """
        if self.role not in RESETTABLE_ROLES:
            raise_bad_request("Password reset is not available for this account type")

        principal = await self.repo.get_by_email(email)
        if not principal:
            raise_not_found(self.label)

        raw_token, token_hash, expires = generate_reset_token()
        principal.password_reset_token = token_hash
        principal.password_reset_expires = expires
        await self.repo.save(principal)

        reset_url = f"{settings.FRONTEND_URL}/{self.role}/reset-password/{raw_token}"
        response = {"message": "Password reset token generated"}

        if settings.DEV_MODE:
            response["reset_token"] = raw_token
        else:
            await NotificationService(self.session).notify(
                NotificationKinds.PASSWORD_RESET,
                principal.email,
                email_templates.password_reset(principal.full_name, reset_url),
                entity_type=self.role,
                entity_id=principal.id
            )
            response["message"] = "Password reset link sent to your email"

        return response

    async def reset_password(self, token: str, password: str) -> dict:
        """Set a new password using a reset token."""
        if self.role not in RESETTABLE_ROLES:
            raise_bad_request("Password reset is not available for this account type")

        principal = await self.repo.get_by_reset_token(hash_reset_token(token))
        if not principal:
            raise_bad_request("Invalid or expired token")

        check_password_strength(password)
        principal.password_hash = get_password_hash(password)
        principal.password_reset_token = None
        principal.password_reset_expires = None
        await self.repo.save(principal)

        logger.info(f"{self.label} password reset: {principal.email}")
        return {"message": "Password reset successful"}
