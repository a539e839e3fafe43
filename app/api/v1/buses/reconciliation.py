"""
Bus fee reconciliation: per-student fee resolution and per-bus / overall aggregation.

Pure functions over loaded Bus/Student/StudentFee objects; no database access.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, List, Optional

from app.core.enums import BusFinanceStatus
from app.core.models import Bus, Student, StudentFee

from .fee_policy import FeeSplit, FeeSplitPolicy, round_cents, to_decimal


@dataclass
class StudentFeeLine:
    student_id: int
    name: str
    district: Optional[str]
    total_fee: Decimal
    actual_collected: Decimal
    split: FeeSplit


@dataclass
class BusFeeSummary:
    bus: Bus
    salary: Decimal
    lines: List[StudentFeeLine] = field(default_factory=list)

    @property
    def total_bus_fee_collected(self) -> Decimal:
        return round_cents(sum((line.split.actual_bus_fee_collected for line in self.lines), Decimal("0")))

    @property
    def expected_bus_income(self) -> Decimal:
        return round_cents(sum((line.split.expected_bus_fee for line in self.lines), Decimal("0")))

    @property
    def collection_gap(self) -> Decimal:
        return round_cents(self.expected_bus_income - self.total_bus_fee_collected)

    @property
    def profit_or_loss_amount(self) -> Decimal:
        return round_cents(self.total_bus_fee_collected - self.salary)

    @property
    def status(self) -> BusFinanceStatus:
        return BusFinanceStatus.PROFIT if self.profit_or_loss_amount >= 0 else BusFinanceStatus.SHORTAGE


@dataclass
class FinanceSummary:
    month: int
    year: int
    buses: List[BusFeeSummary] = field(default_factory=list)

    @property
    def total_students_with_bus(self) -> int:
        return sum(len(b.lines) for b in self.buses)

    @property
    def total_bus_fee_collected(self) -> Decimal:
        return round_cents(sum((b.total_bus_fee_collected for b in self.buses), Decimal("0")))

    @property
    def expected_bus_income(self) -> Decimal:
        return round_cents(sum((b.expected_bus_income for b in self.buses), Decimal("0")))

    @property
    def bus_fee_collection_gap(self) -> Decimal:
        return round_cents(self.expected_bus_income - self.total_bus_fee_collected)

    @property
    def total_bus_salary(self) -> Decimal:
        return round_cents(sum((b.salary for b in self.buses), Decimal("0")))

    @property
    def profit_or_loss(self) -> Decimal:
        return round_cents(self.total_bus_fee_collected - self.total_bus_salary)


def records_for_period(student: Student, month: int, year: int) -> List[StudentFee]:
    return [r for r in (student.monthly_fees or []) if r.month == month and r.year == year]


def resolve_total_fee(student: Student, records: Iterable[StudentFee]) -> Decimal:
    """
    Fee owed for the period: student_fee of the highest-id row that has one,
    else the student's nominal fee, else 0.
    """
    authoritative = max(
        (r for r in records if r.student_fee is not None),
        key=lambda r: r.id,
        default=None,
    )
    if authoritative is not None:
        return round_cents(authoritative.student_fee)
    return round_cents(student.fee or 0)


def resolve_actual_collected(records: Iterable[StudentFee]) -> Decimal:
    """Allocations summed over every row of the period, duplicates included."""
    total = Decimal("0")
    for record in records:
        for allocation in record.allocations or []:
            total += to_decimal(allocation.amount)
    return round_cents(total)


def reconcile_student(student: Student, month: int, year: int, policy: FeeSplitPolicy) -> StudentFeeLine:
    records = records_for_period(student, month, year)
    total_fee = resolve_total_fee(student, records)
    actual_collected = resolve_actual_collected(records)
    return StudentFeeLine(
        student_id=student.id,
        name=student.fullname,
        district=student.district,
        total_fee=total_fee,
        actual_collected=actual_collected,
        split=policy.compute_split(total_fee, actual_collected),
    )


def summarize_bus(bus: Bus, month: int, year: int, policy: FeeSplitPolicy) -> BusFeeSummary:
    salary = round_cents(bus.driver.salary if bus.driver is not None else 0)
    riders = [s for s in (bus.students or []) if not s.is_deleted]
    return BusFeeSummary(
        bus=bus,
        salary=salary,
        lines=[reconcile_student(s, month, year, policy) for s in riders],
    )


def summarize_buses(buses: Iterable[Bus], month: int, year: int, policy: FeeSplitPolicy) -> FinanceSummary:
    return FinanceSummary(
        month=month,
        year=year,
        buses=[summarize_bus(bus, month, year, policy) for bus in buses],
    )
