from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from src.adapter.services.reward_provider_client import HttpRewardProvider
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.error import raise_for_error
from src.api.utils.jwt import verify_jwt
from src.app.services.reward_provider import IRewardProvider
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth import SyncUserUseCase
from src.domain.principal import Principal

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

security = HTTPBearer()


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


def get_reward_provider() -> IRewardProvider:
    return HttpRewardProvider(
        base_url=ApplicationConfig.REWARD_PROVIDER_BASE_URL,
        api_key=ApplicationConfig.REWARD_PROVIDER_API_KEY,
        timeout=ApplicationConfig.REWARD_PROVIDER_TIMEOUT_SECONDS,
    )


async def get_current_principal(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    uow: UnitOfWork = Depends(get_unit_of_work),
) -> Principal:
    """
    Dependency resolving the bearer token to a Principal.

    The token's `sub` claim is the identity provider's stable user id; the
    matching internal user is created on first sight.

    Raises:
        HTTPException: 401 if token is invalid or expired
        ClientError: 403 if the user is deactivated
    """
    payload = verify_jwt(credentials.credentials)

    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )

    result = await SyncUserUseCase(uow).execute(payload["sub"], payload.get("email"))
    if result.is_err():
        raise_for_error(result.error)
    return result.value
