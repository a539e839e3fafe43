"""Data access for buses, students on buses, and the finance summary."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from app.core.enums import EmployeeJobTitle
from app.core.models import Bus, Employee, Student, StudentFee


class TransportRepository(ABC):
    """
    Persistence capabilities the bus service needs.

    update_bus / delete_bus raise sqlalchemy.exc.NoResultFound for an unknown id.
    """

    @abstractmethod
    async def get_student(self, student_id: int) -> Optional[Student]:
        ...

    @abstractmethod
    async def get_bus(self, bus_id: int) -> Optional[Bus]:
        """Bus with its driver loaded."""

    @abstractmethod
    async def set_student_bus(self, student_id: int, bus_id: int) -> Student:
        """Point the student at bus_id in one write; returns the student with bus and driver loaded."""

    @abstractmethod
    async def create_bus(self, values: Dict[str, Any]) -> Bus:
        ...

    @abstractmethod
    async def list_buses(self) -> List[Bus]:
        """Every bus with driver and students loaded."""

    @abstractmethod
    async def get_bus_with_students(self, bus_id: int) -> Optional[Bus]:
        ...

    @abstractmethod
    async def update_bus(self, bus_id: int, values: Dict[str, Any]) -> Bus:
        ...

    @abstractmethod
    async def delete_bus(self, bus_id: int) -> None:
        ...

    @abstractmethod
    async def list_buses_for_period(self, month: int, year: int) -> List[Bus]:
        """
        Buses with driver, non-deleted students, the students' fee rows for (month, year)
        and the allocations on those rows.
        """

    @abstractmethod
    async def list_unassigned_bus_employees(self) -> List[Employee]:
        """Employees titled "Bus" that no bus points at, by full name."""


class SqlAlchemyTransportRepository(TransportRepository):
    """
    Request-scoped repository. Writes go through the request session; single-entity
    lookups open their own short-lived session so they can run concurrently.
    """

    def __init__(self, db: AsyncSession, session_factory: async_sessionmaker) -> None:
        self.db = db
        self.session_factory = session_factory

    async def get_student(self, student_id: int) -> Optional[Student]:
        async with self.session_factory() as session:
            return await session.get(Student, student_id)

    async def get_bus(self, bus_id: int) -> Optional[Bus]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(Bus).options(selectinload(Bus.driver)).where(Bus.id == bus_id)
            )
            return result.scalar_one_or_none()

    async def set_student_bus(self, student_id: int, bus_id: int) -> Student:
        await self.db.execute(
            update(Student).where(Student.id == student_id).values(bus_id=bus_id)
        )
        await self.db.commit()
        result = await self.db.execute(
            select(Student)
            .options(selectinload(Student.bus).selectinload(Bus.driver))
            .where(Student.id == student_id)
        )
        return result.scalar_one()

    async def create_bus(self, values: Dict[str, Any]) -> Bus:
        bus = Bus(**values)
        self.db.add(bus)
        await self.db.commit()
        await self.db.refresh(bus)
        return bus

    async def list_buses(self) -> List[Bus]:
        result = await self.db.execute(
            select(Bus)
            .options(selectinload(Bus.driver), selectinload(Bus.students))
            .order_by(Bus.id)
        )
        return list(result.scalars().all())

    async def get_bus_with_students(self, bus_id: int) -> Optional[Bus]:
        result = await self.db.execute(
            select(Bus)
            .options(selectinload(Bus.driver), selectinload(Bus.students))
            .where(Bus.id == bus_id)
        )
        return result.scalar_one_or_none()

    async def update_bus(self, bus_id: int, values: Dict[str, Any]) -> Bus:
        # No existence check: an unknown id raises NoResultFound from scalar_one()
        if not values:
            result = await self.db.execute(select(Bus).where(Bus.id == bus_id))
            return result.scalar_one()
        result = await self.db.execute(
            update(Bus).where(Bus.id == bus_id).values(**values).returning(Bus)
        )
        bus = result.scalar_one()
        await self.db.commit()
        return bus

    async def delete_bus(self, bus_id: int) -> None:
        result = await self.db.execute(delete(Bus).where(Bus.id == bus_id).returning(Bus.id))
        result.scalar_one()
        await self.db.commit()

    async def list_buses_for_period(self, month: int, year: int) -> List[Bus]:
        stmt = (
            select(Bus)
            .options(
                selectinload(Bus.driver),
                selectinload(Bus.students.and_(Student.is_deleted.is_(False)))
                .selectinload(
                    Student.monthly_fees.and_(StudentFee.month == month, StudentFee.year == year)
                )
                .selectinload(StudentFee.allocations),
            )
            .order_by(Bus.id)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def list_unassigned_bus_employees(self) -> List[Employee]:
        result = await self.db.execute(
            select(Employee)
            .where(
                Employee.job_title == EmployeeJobTitle.BUS.value,
                ~Employee.buses.any(),
            )
            .order_by(Employee.full_name.asc())
        )
        return list(result.scalars().all())
