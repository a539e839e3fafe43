"""Bus service: student assignment, bus CRUD, finance summary, unused driver list."""

import asyncio
import logging
import math
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError

from app.core.exceptions import NotFoundError, ServiceError, ValidationError
from app.core.models import Bus, Employee, Student

from .fee_policy import FeeSplitPolicy
from .reconciliation import BusFeeSummary, StudentFeeLine, summarize_buses
from .repository import TransportRepository
from .schemas import (
    AssignBusRequest,
    AssignBusResponse,
    AssignedBus,
    AssignedStudent,
    BusCreate,
    BusDriverInfo,
    BusEmployee,
    BusFinanceReport,
    BusFinanceSummary,
    BusRecord,
    BusUpdate,
    BusWithRoster,
    DriverName,
    FeePolicyInfo,
    RosterStudent,
    StudentFeeBreakdown,
    StudentFeeDebug,
)

logger = logging.getLogger(__name__)

# Request field name -> Bus column
_BUS_FIELDS = {
    "name": "name",
    "route": "route",
    "plate": "plate",
    "type": "type",
    "color": "color",
    "seats": "seats",
    "capacity": "capacity",
    "driverId": "driver_id",
}


def _to_float(val) -> Optional[float]:
    if val is None:
        return None
    return float(val)


def parse_numeric_id(value: Any) -> Optional[int]:
    """Accept ints, integral floats and numeric strings; anything else is None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value.strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or not number.is_integer():
        return None
    return int(number)


def parse_period(month: Optional[str], year: Optional[str]) -> Tuple[int, int]:
    try:
        return int(str(month).strip()), int(str(year).strip())
    except (TypeError, ValueError):
        raise ValidationError("Month and year must be provided as query parameters.")


# --- Assignment ---
def _assigned_student(student: Student, bus: Optional[Bus]) -> AssignedStudent:
    return AssignedStudent(
        id=student.id,
        name=student.fullname,
        bus=AssignedBus(
            id=bus.id,
            name=bus.name,
            route=bus.route,
            plate=bus.plate,
            driver=bus.driver.full_name if bus.driver is not None else None,
        )
        if bus is not None
        else None,
    )


async def assign_student_to_bus(
    repo: TransportRepository,
    payload: AssignBusRequest,
) -> AssignBusResponse:
    """
    Point a student at a bus. Re-assigning to the current bus is a no-op.
    The student's single bus_id FK means the write also releases any previous bus.
    """
    student_id = parse_numeric_id(payload.studentId)
    bus_id = parse_numeric_id(payload.busId)
    if student_id is None or bus_id is None:
        raise ValidationError("studentId and busId are required (numbers).")

    try:
        student, bus = await asyncio.gather(
            repo.get_student(student_id),
            repo.get_bus(bus_id),
        )
        if student is None:
            raise NotFoundError("Student not found.")
        if bus is None:
            raise NotFoundError("Bus not found.")

        if student.bus_id == bus.id:
            return AssignBusResponse(
                message="Student is already assigned to this bus.",
                previousBusId=student.bus_id,
                assignedBusId=bus.id,
                student=_assigned_student(student, bus),
            )

        previous_bus_id = student.bus_id
        updated = await repo.set_student_bus(student.id, bus.id)
    except SQLAlchemyError:
        logger.exception("Error assigning student %s to bus %s", student_id, bus_id)
        raise ServiceError("Internal server error")

    logger.info("Student %s assigned to bus %s (previous bus %s)", student_id, bus_id, previous_bus_id)
    return AssignBusResponse(
        message=(
            "Student moved to a new bus successfully."
            if previous_bus_id is not None
            else "Bus assigned successfully."
        ),
        previousBusId=previous_bus_id,
        assignedBusId=bus.id,
        student=_assigned_student(updated, updated.bus),
    )


# --- Bus CRUD ---
def _bus_values(payload: BusCreate, only_set: bool = False) -> Dict[str, Any]:
    data = payload.model_dump(exclude_unset=only_set)
    return {_BUS_FIELDS[key]: value for key, value in data.items()}


def _bus_to_record(bus: Bus) -> BusRecord:
    return BusRecord(
        id=bus.id,
        name=bus.name,
        route=bus.route,
        plate=bus.plate,
        type=bus.type,
        color=bus.color,
        seats=bus.seats,
        capacity=bus.capacity,
        driverId=bus.driver_id,
    )


def _bus_to_roster(bus: Bus) -> BusWithRoster:
    return BusWithRoster(
        **_bus_to_record(bus).model_dump(),
        driver=DriverName(fullName=bus.driver.full_name) if bus.driver is not None else None,
        students=[
            RosterStudent(id=s.id, fullname=s.fullname, classId=s.class_id)
            for s in bus.students
        ],
    )


async def create_bus(repo: TransportRepository, payload: BusCreate) -> BusRecord:
    try:
        bus = await repo.create_bus(_bus_values(payload))
    except SQLAlchemyError:
        logger.exception("Error creating bus")
        raise ServiceError("Failed to create bus")
    logger.info("Bus %s created", bus.id)
    return _bus_to_record(bus)


async def list_buses(repo: TransportRepository) -> List[BusWithRoster]:
    try:
        buses = await repo.list_buses()
    except SQLAlchemyError:
        logger.exception("Error fetching buses")
        raise ServiceError("Failed to fetch buses")
    return [_bus_to_roster(b) for b in buses]


async def get_bus(repo: TransportRepository, bus_id: int) -> Optional[BusWithRoster]:
    try:
        bus = await repo.get_bus_with_students(bus_id)
    except SQLAlchemyError:
        logger.exception("Error fetching bus %s", bus_id)
        raise ServiceError("Failed to fetch bus")
    if bus is None:
        return None
    return _bus_to_roster(bus)


async def update_bus(repo: TransportRepository, bus_id: int, payload: BusUpdate) -> BusRecord:
    # Unknown ids fail inside the repository and surface as 500, not 404.
    try:
        bus = await repo.update_bus(bus_id, _bus_values(payload, only_set=True))
    except SQLAlchemyError:
        logger.exception("Error updating bus %s", bus_id)
        raise ServiceError("Failed to update bus")
    logger.info("Bus %s updated", bus_id)
    return _bus_to_record(bus)


async def delete_bus(repo: TransportRepository, bus_id: int) -> None:
    try:
        await repo.delete_bus(bus_id)
    except SQLAlchemyError:
        logger.exception("Error deleting bus %s", bus_id)
        raise ServiceError("Failed to delete bus")
    logger.info("Bus %s deleted", bus_id)


# --- Finance summary ---
def _line_to_breakdown(line: StudentFeeLine, policy: FeeSplitPolicy, debug: bool) -> StudentFeeBreakdown:
    split = line.split
    return StudentFeeBreakdown(
        id=line.student_id,
        name=line.name,
        district=line.district if line.district is not None else "Unknown",
        totalFee=float(line.total_fee),
        schoolFee=float(split.school_fee),
        expectedBusFee=float(split.expected_bus_fee),
        actualBusFeeCollected=float(split.actual_bus_fee_collected),
        unpaidBusFee=float(split.unpaid_bus_fee),
        debug=StudentFeeDebug(
            calcVersion=policy.calc_version,
            actualCollected=float(line.actual_collected),
            SCHOOL_FIRST=_to_float(policy.school_first),
            BUS_CAP=_to_float(policy.bus_cap),
        )
        if debug
        else None,
    )


def _bus_summary(summary: BusFeeSummary, policy: FeeSplitPolicy, debug: bool) -> BusFinanceSummary:
    bus = summary.bus
    return BusFinanceSummary(
        busId=bus.id,
        name=bus.name,
        route=bus.route,
        plate=bus.plate,
        driver=BusDriverInfo(id=bus.driver.id, name=bus.driver.full_name, salary=float(summary.salary))
        if bus.driver is not None
        else None,
        studentCount=len(summary.lines),
        totalBusFeeCollected=float(summary.total_bus_fee_collected),
        expectedBusIncome=float(summary.expected_bus_income),
        collectionGap=float(summary.collection_gap),
        status=summary.status.value,
        profitOrLossAmount=float(summary.profit_or_loss_amount),
        students=[_line_to_breakdown(line, policy, debug) for line in summary.lines],
    )


async def get_finance_summary(
    repo: TransportRepository,
    policy: FeeSplitPolicy,
    month: int,
    year: int,
    debug: bool = False,
) -> BusFinanceReport:
    """Expected vs collected bus fees per bus for (month, year), against each driver's salary."""
    try:
        buses = await repo.list_buses_for_period(month, year)
    except SQLAlchemyError:
        logger.exception("Error loading bus finance summary for %s/%s", month, year)
        raise ServiceError("Failed to load bus fee and salary summary.")

    summary = summarize_buses(buses, month, year, policy)
    return BusFinanceReport(
        policy=FeePolicyInfo(**policy.describe()),
        month=month,
        year=year,
        totalBuses=len(summary.buses),
        totalStudentsWithBus=summary.total_students_with_bus,
        totalBusFeeCollected=float(summary.total_bus_fee_collected),
        expectedBusIncome=float(summary.expected_bus_income),
        busFeeCollectionGap=float(summary.bus_fee_collection_gap),
        totalBusSalary=float(summary.total_bus_salary),
        profitOrLoss=float(summary.profit_or_loss),
        busSummaries=[_bus_summary(b, policy, debug) for b in summary.buses],
    )


# --- Employees ---
async def list_unused_bus_employees(repo: TransportRepository) -> List[BusEmployee]:
    try:
        employees: List[Employee] = await repo.list_unassigned_bus_employees()
    except SQLAlchemyError:
        logger.exception("Error fetching unused bus employees")
        raise ServiceError("Internal server error")
    return [
        BusEmployee(
            id=e.id,
            fullName=e.full_name,
            salary=_to_float(e.salary),
            jobTitle=e.job_title,
        )
        for e in employees
    ]
