from abc import ABC, abstractmethod

from src.app.repositories.audit_event_repository import IAuditEventRepository
from src.app.repositories.catalog_item_repository import ICatalogItemRepository
from src.app.repositories.challenge_repository import IChallengeRepository
from src.app.repositories.invite_code_repository import IInviteCodeRepository
from src.app.repositories.membership_repository import IMembershipRepository
from src.app.repositories.points_balance_repository import IPointsBalanceRepository
from src.app.repositories.reward_issuance_repository import IRewardIssuanceRepository
from src.app.repositories.user_repository import IUserRepository
from src.app.repositories.webhook_event_repository import IWebhookEventRepository
from src.app.repositories.workspace_repository import IWorkspaceRepository


class UnitOfWork(ABC):
    """Abstract UnitOfWork - defines repository access and transaction management"""

    # Repository properties (initialized in __aenter__)
    users: IUserRepository
    workspaces: IWorkspaceRepository
    memberships: IMembershipRepository
    invite_codes: IInviteCodeRepository
    challenges: IChallengeRepository
    points_balances: IPointsBalanceRepository
    catalog_items: ICatalogItemRepository
    reward_issuances: IRewardIssuanceRepository
    webhook_events: IWebhookEventRepository
    audit_events: IAuditEventRepository

    @abstractmethod
    async def __aenter__(self):
        pass

    @abstractmethod
    async def __aexit__(self, *args):
        pass

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass
