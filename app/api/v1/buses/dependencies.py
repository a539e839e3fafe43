from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.config import settings
from app.db.session import get_db, get_session_factory

from .fee_policy import FeeSplitPolicy, build_policy
from .repository import SqlAlchemyTransportRepository, TransportRepository


async def get_transport_repository(
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker = Depends(get_session_factory),
) -> TransportRepository:
    return SqlAlchemyTransportRepository(db, session_factory)


def get_fee_policy() -> FeeSplitPolicy:
    """Policy selected by FEE_SPLIT_POLICY, with optional amount overrides."""
    return build_policy(
        settings.fee_split_policy,
        school_first=settings.school_first_amount,
        bus_cap=settings.bus_fee_cap,
    )
