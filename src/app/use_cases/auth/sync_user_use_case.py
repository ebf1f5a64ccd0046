"""
Sync User Use Case

Binds an identity-provider subject to an internal user on every request.
"""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError

from libs.result import Error, Result, Return
from src.app.errors import ErrorCode, translate_storage_errors
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import User, UserStatus
from src.domain.principal import Principal

logger = logging.getLogger(__name__)


class SyncUserUseCase:
    """
    Use case for resolving an authenticated subject to a Principal.

    Business Rules:
    - The first authentication of a subject creates its User row
    - Deactivated users are refused; users are never deleted
    - The email follows the identity provider's latest claim
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    @translate_storage_errors
    async def execute(self, external_auth_id: str, email: Optional[str]) -> Result[Principal]:
        if not external_auth_id:
            return Return.err(Error(ErrorCode.INVALID_INPUT, "Token subject is missing"))
        email = (email or "").strip().lower()

        async with self.uow:
            user = await self.uow.users.get_by_external_auth_id(external_auth_id)

            if user is None:
                try:
                    user = await self.uow.users.create(
                        User(external_auth_id=external_auth_id, email=email)
                    )
                    await self.uow.commit()
                    logger.info("Created user %s for subject %s", user.id, external_auth_id)
                except IntegrityError:
                    # Concurrent first request for the same subject won the insert
                    await self.uow.rollback()
                    user = await self.uow.users.get_by_external_auth_id(external_auth_id)
                    if user is None:
                        raise

            if user.status == UserStatus.deactivated:
                return Return.err(Error(ErrorCode.FORBIDDEN, "User account is deactivated"))

            if email and user.email != email:
                user.email = email
                await self.uow.users.update(user)
                await self.uow.commit()

            return Return.ok(
                Principal(user_id=user.id, email=user.email, external_auth_id=user.external_auth_id)
            )
