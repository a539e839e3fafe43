"""Unit tests for per-student fee resolution and per-bus aggregation."""

from decimal import Decimal

from app.api.v1.buses.fee_policy import SchoolFirstPolicy
from app.api.v1.buses.reconciliation import (
    records_for_period,
    reconcile_student,
    resolve_actual_collected,
    resolve_total_fee,
    summarize_bus,
    summarize_buses,
)
from app.core.enums import BusFinanceStatus

from tests.fakes import InMemoryTransportRepository

MONTH, YEAR = 9, 2025


def _repo_with_bus(salary="50"):
    repo = InMemoryTransportRepository()
    driver = repo.add_employee(1, "Driver One", salary=salary)
    bus = repo.add_bus(1, "Bus A", driver=driver, route="North", plate="ABC-1")
    return repo, bus


def test_total_fee_prefers_highest_id_row_with_fee() -> None:
    repo, bus = _repo_with_bus()
    student = repo.add_student(1, "Amina", bus=bus, fee="25")
    repo.add_fee_row(student, id=3, month=MONTH, year=YEAR, student_fee="22")
    repo.add_fee_row(student, id=7, month=MONTH, year=YEAR, student_fee="30")
    repo.add_fee_row(student, id=9, month=MONTH, year=YEAR, student_fee=None)

    records = records_for_period(student, MONTH, YEAR)
    assert resolve_total_fee(student, records) == Decimal("30")
    # row order does not matter
    assert resolve_total_fee(student, list(reversed(records))) == Decimal("30")


def test_total_fee_falls_back_to_profile_fee_then_zero() -> None:
    repo, bus = _repo_with_bus()
    with_profile_fee = repo.add_student(1, "Amina", bus=bus, fee="24.5")
    repo.add_fee_row(with_profile_fee, id=1, month=MONTH, year=YEAR, student_fee=None)
    without_fee = repo.add_student(2, "Bilal", bus=bus)

    assert resolve_total_fee(with_profile_fee, records_for_period(with_profile_fee, MONTH, YEAR)) == Decimal("24.5")
    assert resolve_total_fee(without_fee, []) == Decimal("0")


def test_collected_sums_every_row_in_period() -> None:
    repo, bus = _repo_with_bus()
    student = repo.add_student(1, "Amina", bus=bus, fee="27")
    repo.add_fee_row(student, id=1, month=MONTH, year=YEAR, student_fee="27", payments=["10", "5.5"])
    repo.add_fee_row(student, id=2, month=MONTH, year=YEAR, student_fee=None, payments=["4"])
    # other months are ignored
    repo.add_fee_row(student, id=3, month=MONTH + 1, year=YEAR, student_fee="27", payments=["27"])
    repo.add_fee_row(student, id=4, month=MONTH, year=YEAR - 1, student_fee="27", payments=["27"])

    records = records_for_period(student, MONTH, YEAR)
    assert [r.id for r in records] == [1, 2]
    assert resolve_actual_collected(records) == Decimal("19.50")


def test_reconcile_student_line() -> None:
    repo, bus = _repo_with_bus()
    student = repo.add_student(1, "Amina", bus=bus, fee="20", district="Hodan")
    repo.add_fee_row(student, id=1, month=MONTH, year=YEAR, student_fee="30", payments=["25"])

    line = reconcile_student(student, MONTH, YEAR, SchoolFirstPolicy())
    assert line.student_id == 1
    assert line.district == "Hodan"
    assert line.total_fee == Decimal("30")
    assert line.actual_collected == Decimal("25")
    assert line.split.actual_bus_fee_collected == Decimal("8")
    assert line.split.unpaid_bus_fee == Decimal("2")


def test_bus_with_paid_and_unpaid_student_is_short() -> None:
    repo, bus = _repo_with_bus(salary="50")
    paid = repo.add_student(1, "Paid", bus=bus, fee="27")
    repo.add_fee_row(paid, id=1, month=MONTH, year=YEAR, student_fee="27", payments=["27"])
    repo.add_student(2, "Unpaid", bus=bus, fee="27")

    summary = summarize_bus(bus, MONTH, YEAR, SchoolFirstPolicy())
    assert [line.split.actual_bus_fee_collected for line in summary.lines] == [Decimal("10"), Decimal("0")]
    assert summary.total_bus_fee_collected == Decimal("10")
    assert summary.expected_bus_income == Decimal("20")
    assert summary.collection_gap == Decimal("10")
    assert summary.profit_or_loss_amount == Decimal("-40")
    assert summary.status == BusFinanceStatus.SHORTAGE


def test_bus_breaking_even_is_profit() -> None:
    repo, bus = _repo_with_bus(salary="10")
    student = repo.add_student(1, "Paid", bus=bus, fee="27")
    repo.add_fee_row(student, id=1, month=MONTH, year=YEAR, payments=["27"])

    summary = summarize_bus(bus, MONTH, YEAR, SchoolFirstPolicy())
    assert summary.profit_or_loss_amount == Decimal("0")
    assert summary.status == BusFinanceStatus.PROFIT


def test_soft_deleted_students_excluded() -> None:
    repo, bus = _repo_with_bus()
    repo.add_student(1, "Active", bus=bus, fee="27")
    repo.add_student(2, "Gone", bus=bus, fee="27", is_deleted=True)

    summary = summarize_bus(bus, MONTH, YEAR, SchoolFirstPolicy())
    assert [line.name for line in summary.lines] == ["Active"]


def test_bus_without_driver_has_zero_salary() -> None:
    repo = InMemoryTransportRepository()
    bus = repo.add_bus(2, "Spare")
    summary = summarize_bus(bus, MONTH, YEAR, SchoolFirstPolicy())
    assert summary.salary == Decimal("0")
    assert summary.lines == []
    assert summary.status == BusFinanceStatus.PROFIT


def test_grand_totals_and_order_independence() -> None:
    repo = InMemoryTransportRepository()
    d1 = repo.add_employee(1, "Driver One", salary="50")
    d2 = repo.add_employee(2, "Driver Two", salary="12.25")
    bus_a = repo.add_bus(1, "Bus A", driver=d1)
    bus_b = repo.add_bus(2, "Bus B", driver=d2)
    for i, (bus, fee, paid) in enumerate(
        [(bus_a, "27", "27"), (bus_a, "20.33", "18.1"), (bus_b, "26.99", "26.99"), (bus_b, "30", "0")],
        start=1,
    ):
        student = repo.add_student(i, f"Student {i}", bus=bus, fee=fee)
        repo.add_fee_row(student, id=i, month=MONTH, year=YEAR, payments=[paid])

    policy = SchoolFirstPolicy()
    forward = summarize_buses([bus_a, bus_b], MONTH, YEAR, policy)
    backward = summarize_buses([bus_b, bus_a], MONTH, YEAR, policy)

    # A: 10 + 1.1 collected of 10 + 3.33; B: 9.99 + 0 of 9.99 + 10
    assert forward.total_students_with_bus == 4
    assert forward.total_bus_fee_collected == Decimal("21.09")
    assert forward.expected_bus_income == Decimal("33.32")
    assert forward.bus_fee_collection_gap == Decimal("12.23")
    assert forward.total_bus_salary == Decimal("62.25")
    assert forward.profit_or_loss == Decimal("-41.16")

    for attr in (
        "total_bus_fee_collected",
        "expected_bus_income",
        "bus_fee_collection_gap",
        "total_bus_salary",
        "profit_or_loss",
    ):
        assert getattr(forward, attr) == getattr(backward, attr)
