"""
Persistence layer for users, patients and handovers.

Routers and the background pipeline go through `storage` instead of
building queries themselves. Every method takes the caller's session and
only flushes; committing is left to the caller.
"""

from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_
from app.auth import hash_password, verify_password
from app.models.user import User
from app.models.patient import Patient
from app.models.handover import Handover


class DatabaseStorage:
    # Users

    async def get_user(self, db: AsyncSession, user_id: int) -> Optional[User]:
        return await db.get(User, user_id)

    async def get_user_by_employee_id(self, db: AsyncSession, employee_id: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.employee_id == employee_id))
        return result.scalar_one_or_none()

    async def create_user(self, db: AsyncSession, data: dict) -> User:
        data = dict(data)
        data["password"] = hash_password(data["password"])
        user = User(**data)
        db.add(user)
        await db.flush()
        await db.refresh(user)
        return user

    async def validate_user(self, db: AsyncSession, employee_id: str, password: str) -> Optional[User]:
        user = await self.get_user_by_employee_id(db, employee_id)
        if user and verify_password(password, user.password):
            return user
        return None

    async def update_user(self, db: AsyncSession, user_id: int, data: dict) -> Optional[User]:
        user = await self.get_user(db, user_id)
        if not user:
            return None
        if "password" in data:
            data = dict(data, password=hash_password(data["password"]))
        for key, value in data.items():
            setattr(user, key, value)
        await db.flush()
        await db.refresh(user)
        return user

    async def count_users(self, db: AsyncSession) -> int:
        return await db.scalar(select(func.count(User.id))) or 0

    # Patients

    async def get_patient(self, db: AsyncSession, patient_id: int) -> Optional[Patient]:
        return await db.get(Patient, patient_id)

    async def get_patient_by_code(self, db: AsyncSession, code: str) -> Optional[Patient]:
        result = await db.execute(select(Patient).where(Patient.patient_id == code))
        return result.scalar_one_or_none()

    async def create_patient(self, db: AsyncSession, data: dict) -> Patient:
        patient = Patient(**data)
        db.add(patient)
        await db.flush()
        await db.refresh(patient)
        return patient

    async def update_patient(self, db: AsyncSession, patient_id: int, data: dict) -> Optional[Patient]:
        patient = await self.get_patient(db, patient_id)
        if not patient:
            return None
        for key, value in data.items():
            setattr(patient, key, value)
        await db.flush()
        await db.refresh(patient)
        return patient

    async def delete_patient(self, db: AsyncSession, patient_id: int) -> bool:
        patient = await self.get_patient(db, patient_id)
        if not patient:
            return False
        await db.delete(patient)
        await db.flush()
        return True

    async def search_patients(
        self,
        db: AsyncSession,
        query: str = "",
        ward: Optional[str] = None,
        status: Optional[str] = None,
    ) -> list[Patient]:
        stmt = select(Patient)
        if query:
            pattern = f"%{query}%"
            stmt = stmt.where(
                or_(
                    Patient.name.ilike(pattern),
                    Patient.patient_id.ilike(pattern),
                    Patient.room.ilike(pattern),
                )
            )
        if ward:
            stmt = stmt.where(Patient.ward == ward)
        if status:
            stmt = stmt.where(Patient.status == status)
        result = await db.execute(stmt.order_by(Patient.patient_id))
        return list(result.scalars().all())

    # Handovers

    async def get_handover(self, db: AsyncSession, handover_id: int) -> Optional[Handover]:
        return await db.get(Handover, handover_id)

    async def create_handover(self, db: AsyncSession, data: dict) -> Handover:
        handover = Handover(**data)
        db.add(handover)
        await db.flush()
        await db.refresh(handover)
        return handover

    async def update_handover(self, db: AsyncSession, handover_id: int, data: dict) -> Optional[Handover]:
        handover = await self.get_handover(db, handover_id)
        if not handover:
            return None
        for key, value in data.items():
            setattr(handover, key, value)
        await db.flush()
        return handover

    async def get_recent_handovers(self, db: AsyncSession, limit: int = 10) -> list[Handover]:
        result = await db.execute(
            select(Handover).order_by(Handover.created_at.desc(), Handover.id.desc()).limit(limit)
        )
        return list(result.scalars().all())

    async def get_handovers_by_patient(self, db: AsyncSession, patient_id: int) -> list[Handover]:
        result = await db.execute(
            select(Handover)
            .where(Handover.patient_id == patient_id)
            .order_by(Handover.created_at.desc(), Handover.id.desc())
        )
        return list(result.scalars().all())

    async def get_handovers_by_nurse(self, db: AsyncSession, nurse_id: int) -> list[Handover]:
        result = await db.execute(
            select(Handover)
            .where(Handover.nurser_id == nurse_id)
            .order_by(Handover.created_at.desc(), Handover.id.desc())
        )
        return list(result.scalars().all())

    async def count_handovers(self, db: AsyncSession) -> int:
        return await db.scalar(select(func.count(Handover.id))) or 0

    async def count_handovers_for_patient(self, db: AsyncSession, patient_id: int) -> int:
        return await db.scalar(
            select(func.count(Handover.id)).where(Handover.patient_id == patient_id)
        ) or 0

    async def count_patients_with_handovers(self, db: AsyncSession) -> int:
        return await db.scalar(select(func.count(func.distinct(Handover.patient_id)))) or 0

    async def get_handover_timestamps(self, db: AsyncSession) -> list:
        result = await db.execute(select(Handover.created_at))
        return [ts for ts in result.scalars().all() if ts is not None]


storage = DatabaseStorage()
