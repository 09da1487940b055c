"""Member Profile Source — read-only view of member identity and container attributes."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.bp_member.domain.models import MemberProfile


class MemberProfileSourceProtocol(Protocol):
    async def get_profile(
        self, db: AsyncSession, member_id: str
    ) -> MemberProfile | None: ...
