from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories.audit_event_repository import AuditEventRepository
from src.adapter.repositories.catalog_item_repository import CatalogItemRepository
from src.adapter.repositories.challenge_repository import ChallengeRepository
from src.adapter.repositories.invite_code_repository import InviteCodeRepository
from src.adapter.repositories.membership_repository import MembershipRepository
from src.adapter.repositories.points_balance_repository import PointsBalanceRepository
from src.adapter.repositories.reward_issuance_repository import RewardIssuanceRepository
from src.adapter.repositories.user_repository import UserRepository
from src.adapter.repositories.webhook_event_repository import WebhookEventRepository
from src.adapter.repositories.workspace_repository import WorkspaceRepository
from src.app.services.unit_of_work import UnitOfWork


class SqlAlchemyUnitOfWork(UnitOfWork):
    """SQLAlchemy implementation of UnitOfWork pattern"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def __aenter__(self):
        # Initialize all repositories with the session
        self.users = UserRepository(self.session)
        self.workspaces = WorkspaceRepository(self.session)
        self.memberships = MembershipRepository(self.session)
        self.invite_codes = InviteCodeRepository(self.session)
        self.challenges = ChallengeRepository(self.session)
        self.points_balances = PointsBalanceRepository(self.session)
        self.catalog_items = CatalogItemRepository(self.session)
        self.reward_issuances = RewardIssuanceRepository(self.session)
        self.webhook_events = WebhookEventRepository(self.session)
        self.audit_events = AuditEventRepository(self.session)
        return self

    async def __aexit__(self, *args):
        await self.rollback()

    async def commit(self):
        await self.session.commit()

    async def rollback(self):
        await self.session.rollback()
