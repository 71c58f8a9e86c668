"""
Professional directory: who the professionals are and when they work.
"""
from typing import Dict, Iterable, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from errors import ProfessionalNotFound
from models import Professional
from slots import ProfessionalSchedule


class ProfessionalDirectory:
    """Read-only view over the healthcare_professionals table."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, professional_id: int) -> Professional:
        professional = await self.session.get(Professional, professional_id)
        if professional is None:
            raise ProfessionalNotFound(f"Professional {professional_id} not found")
        return professional

    async def get_schedule(self, professional_id: int) -> ProfessionalSchedule:
        professional = await self.get(professional_id)
        return ProfessionalSchedule(
            professional_id=professional.id,
            work_start=professional.availability_start,
            work_end=professional.availability_end,
        )

    async def get_many(self, professional_ids: Iterable[int]) -> Dict[int, Professional]:
        """Lookup dict keyed by id. Unknown ids are simply absent."""
        ids = set(professional_ids)
        if not ids:
            return {}
        statement = select(Professional).where(Professional.id.in_(ids))
        result = await self.session.execute(statement)
        return {p.id: p for p in result.scalars().all()}

    async def list_professionals(self, specialization: Optional[str] = None) -> List[Professional]:
        statement = select(Professional)
        if specialization:
            statement = statement.where(Professional.specialization.contains(specialization))
        statement = statement.order_by(Professional.id)
        result = await self.session.execute(statement)
        return list(result.scalars().all())
