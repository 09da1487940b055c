"""MemberProfileSource — read-only ORM lookup of member profiles."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.bp_member.domain.models import MemberProfile
from src.bp_member.infrastructure.db_models import MemberModel


def _model_to_profile(model: MemberModel) -> MemberProfile:
    return MemberProfile(
        id=model.id,
        display_name=model.display_name,
        roll_number=model.roll_number,
        period=model.period,
        group=model.group_name,
        subgroup=model.subgroup,
        term=model.term,
        cohort=model.cohort,
    )


class MemberProfileSource:
    async def get_profile(
        self, db: AsyncSession, member_id: str
    ) -> MemberProfile | None:
        result = await db.execute(select(MemberModel).where(MemberModel.id == member_id))
        model = result.scalar_one_or_none()
        return _model_to_profile(model) if model else None
