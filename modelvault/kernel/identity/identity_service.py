"""
Identity service for user management operations.
"""

import uuid
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from modelvault.config import get_settings
from modelvault.errors import (
    AuthorizationError,
    ConflictError,
    UserNotFoundError,
    ValidationError,
)
from modelvault.kernel.events.event_store import EventStore
from modelvault.kernel.identity.password import (
    PasswordHasher,
    generate_pin,
    hash_password,
    verify_password,
)
from modelvault.kernel.models.event_log import EventType
from modelvault.kernel.models.user import User
from modelvault.kernel.permissions import Permission, grant, has_permission

USER_NOT_FOUND_DETAIL = "User not found"
INVALID_EMAIL_DETAIL = "Invalid email for given user"
INVALID_PERMISSIONS_DETAIL = "Invalid permissions for given user"
OLD_PASSWORD_MISSING_DETAIL = "Old password should be provided"
OLD_PASSWORD_INVALID_DETAIL = "Invalid old password"


class IdentityService:
    """
    Service for user identity operations.

    Handles account creation, credential checks and account removal.
    Tokens are issued by the caller once `authenticate` succeeds.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.event_store = EventStore(session)

    async def create_user(
        self,
        name: str,
        email: str,
        password: Optional[str] = None,
        permissions: int = 0,
        default_lang: Optional[str] = None,
        created_by: Optional[uuid.UUID] = None,
        ip_address: Optional[str] = None,
    ) -> tuple[User, str]:
        """
        Create a new user.

        Args:
            name: Display name
            email: Login email, stored lower-cased
            password: Plain text password; a random PIN when omitted
            permissions: Permission bitmask
            default_lang: Preferred language tag
            created_by: ID of the acting admin, for audit
            ip_address: Client IP for audit

        Returns:
            Tuple of (User, plain password). The plain password is only
            ever available here.

        Raises:
            ConflictError: If the email is already registered
        """
        existing = await self.get_user_by_email(email)
        if existing:
            raise ConflictError()

        plain_password = password or generate_pin()

        user = User(
            email=email.lower().strip(),
            name=name.strip(),
            password_hash=hash_password(plain_password),
            permissions=permissions,
            default_lang=default_lang or get_settings().default_language,
        )

        self.session.add(user)
        await self.session.flush()

        await self.event_store.log(
            event_type=EventType.USER_CREATED,
            entity_type="user",
            entity_id=user.id,
            user_id=created_by,
            payload={"email": user.email, "permissions": user.permissions},
            ip_address=ip_address,
        )

        return user, plain_password

    async def authenticate(
        self,
        email: str,
        password: str,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Optional[User]:
        """
        Check credentials.

        Returns:
            The User if email and password match, None otherwise
        """
        user = await self.get_user_by_email(email)
        if not user:
            return None

        if not verify_password(password, user.password_hash):
            return None

        await self.event_store.log(
            event_type=EventType.USER_LOGGED_IN,
            entity_type="user",
            entity_id=user.id,
            user_id=user.id,
            payload={"method": "password"},
            ip_address=ip_address,
            user_agent=user_agent,
        )

        return user

    async def get_user_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        """Get a user by ID."""
        result = await self.session.execute(
            select(User).where(User.id == user_id)
        )
        return result.scalar_one_or_none()

    async def get_user_by_email(self, email: str) -> Optional[User]:
        """Get a user by email (case-insensitive)."""
        result = await self.session.execute(
            select(User).where(User.email == email.lower().strip())
        )
        return result.scalar_one_or_none()

    async def list_users(self) -> List[User]:
        """All users, oldest first."""
        result = await self.session.execute(
            select(User).order_by(User.created_at, User.email)
        )
        return list(result.scalars().all())

    async def update_user(
        self,
        user_id: uuid.UUID,
        name: str,
        email: str,
        permissions: int,
        password: Optional[str] = None,
        updated_by: Optional[uuid.UUID] = None,
        ip_address: Optional[str] = None,
    ) -> User:
        """
        Edit an account on behalf of an admin.

        Name, permissions and password may change; the email may not. The
        SUPER bit can neither be granted nor taken away here.

        Raises:
            UserNotFoundError: If the user does not exist
            ValidationError: If the email differs from the stored one
            AuthorizationError: If the new mask would grant SUPER
        """
        user = await self._get_for_update(user_id, email)

        if has_permission(user.permissions, Permission.SUPER):
            permissions = grant(permissions, Permission.SUPER)
        elif has_permission(permissions, Permission.SUPER):
            raise AuthorizationError()

        return await self._apply_update(
            user,
            name=name,
            permissions=permissions,
            password=password,
            updated_by=updated_by,
            ip_address=ip_address,
        )

    async def update_own_account(
        self,
        user_id: uuid.UUID,
        name: str,
        email: str,
        permissions: int,
        password: Optional[str] = None,
        old_password: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> User:
        """
        Edit the caller's own account.

        Email and permissions must repeat the stored values. A new password
        is only accepted together with the current one.
        """
        user = await self._get_for_update(user_id, email)

        if permissions != user.permissions:
            raise ValidationError(INVALID_PERMISSIONS_DETAIL)

        if password:
            if not old_password:
                raise ValidationError(OLD_PASSWORD_MISSING_DETAIL)
            if not PasswordHasher.verify(old_password, user.password_hash):
                raise ValidationError(OLD_PASSWORD_INVALID_DETAIL)

        return await self._apply_update(
            user,
            name=name,
            permissions=permissions,
            password=password,
            updated_by=user.id,
            ip_address=ip_address,
        )

    async def _get_for_update(self, user_id: uuid.UUID, email: str) -> User:
        user = await self.get_user_by_id(user_id)
        if not user:
            raise UserNotFoundError(USER_NOT_FOUND_DETAIL)
        if email.lower().strip() != user.email:
            raise ValidationError(INVALID_EMAIL_DETAIL)
        return user

    async def _apply_update(
        self,
        user: User,
        name: str,
        permissions: int,
        password: Optional[str],
        updated_by: Optional[uuid.UUID],
        ip_address: Optional[str],
    ) -> User:
        changed = []
        name = name.strip()
        if name != user.name:
            user.name = name
            changed.append("name")
        if permissions != user.permissions:
            user.permissions = permissions
            changed.append("permissions")
        if password:
            user.password_hash = PasswordHasher.hash(password)
            changed.append("password")

        await self.session.flush()

        # Field names only
        await self.event_store.log(
            event_type=EventType.USER_UPDATED,
            entity_type="user",
            entity_id=user.id,
            user_id=updated_by,
            payload={"changed": changed, "permissions": user.permissions},
            ip_address=ip_address,
        )
        return user

    async def delete_user(
        self,
        user_id: uuid.UUID,
        deleted_by: Optional[uuid.UUID] = None,
        ip_address: Optional[str] = None,
    ) -> User:
        """
        Delete an account.

        Model ownership must already have been released; see
        OwnershipLedger.remove_user_everywhere.

        Raises:
            UserNotFoundError: If the user does not exist
        """
        user = await self.get_user_by_id(user_id)
        if not user:
            raise UserNotFoundError()

        await self.event_store.log(
            event_type=EventType.USER_DELETED,
            entity_type="user",
            entity_id=user.id,
            user_id=deleted_by,
            payload={"email": user.email},
            ip_address=ip_address,
        )

        await self.session.delete(user)
        await self.session.flush()
        return user
