"""Fee split policies: how a student's monthly fee and payments divide between school and bus."""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Optional, Type

CENT = Decimal("0.01")


def to_decimal(val) -> Decimal:
    if val is None:
        return Decimal("0")
    return val if isinstance(val, Decimal) else Decimal(str(val))


def round_cents(val) -> Decimal:
    """Round to 2 decimals, half away from zero."""
    return to_decimal(val).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class FeeSplit:
    school_fee: Decimal
    expected_bus_fee: Decimal
    actual_bus_fee_collected: Decimal
    unpaid_bus_fee: Decimal


class FeeSplitPolicy:
    """
    Base policy. Subclasses implement compute_split(total_fee, actual_collected).

    school_first is the school portion (ceiling or standard fee, depending on the policy);
    bus_cap is the ceiling on the bus portion, None when the policy does not cap it.
    """

    calc_version: str = ""
    description: str = ""
    default_school_first: Optional[Decimal] = None
    default_bus_cap: Optional[Decimal] = None

    def __init__(self, school_first=None, bus_cap=None) -> None:
        self.school_first = to_decimal(school_first) if school_first is not None else self.default_school_first
        self.bus_cap = to_decimal(bus_cap) if bus_cap is not None else self.default_bus_cap

    def compute_split(self, total_fee, actual_collected) -> FeeSplit:
        raise NotImplementedError

    def describe(self) -> dict:
        """JSON-ready summary of the policy and its constants."""
        return {
            "calcVersion": self.calc_version,
            "description": self.description.format(school_first=self.school_first, bus_cap=self.bus_cap),
            "SCHOOL_FIRST": float(self.school_first) if self.school_first is not None else None,
            "BUS_CAP": float(self.bus_cap) if self.bus_cap is not None else None,
        }

    @staticmethod
    def _rounded(school_fee, expected_bus_fee, actual_bus_fee_collected) -> FeeSplit:
        return FeeSplit(
            school_fee=round_cents(school_fee),
            expected_bus_fee=round_cents(expected_bus_fee),
            actual_bus_fee_collected=round_cents(actual_bus_fee_collected),
            unpaid_bus_fee=round_cents(expected_bus_fee - actual_bus_fee_collected),
        )


class SchoolFirstPolicy(FeeSplitPolicy):
    """School takes up to school_first; the remainder is bus, capped at bus_cap. Payments cover school first."""

    calc_version = "schoolFirst_v2"
    description = "School fee first up to {school_first}, bus remainder capped at {bus_cap}. Payments cover school first."
    default_school_first = Decimal("17")
    default_bus_cap = Decimal("10")

    def compute_split(self, total_fee, actual_collected) -> FeeSplit:
        total_fee = to_decimal(total_fee)
        actual_collected = to_decimal(actual_collected)

        school_fee = min(total_fee, self.school_first)
        expected_bus_fee = min(max(total_fee - self.school_first, Decimal("0")), self.bus_cap)

        remainder = max(actual_collected - school_fee, Decimal("0"))
        actual_bus_fee_collected = min(remainder, expected_bus_fee)

        return self._rounded(school_fee, expected_bus_fee, actual_bus_fee_collected)


class FixedBusPortionPolicy(FeeSplitPolicy):
    """Historical: the last bus_cap of the fee is bus, everything before it is school."""

    calc_version = "fixedBusPortion_v1"
    description = "School fee = total fee minus {bus_cap}, bus = remainder (max {bus_cap}). Payments cover school first."
    default_school_first = Decimal("0")
    default_bus_cap = Decimal("10")

    def compute_split(self, total_fee, actual_collected) -> FeeSplit:
        total_fee = to_decimal(total_fee)
        actual_collected = to_decimal(actual_collected)

        school_fee = max(total_fee - self.bus_cap, Decimal("0"))
        expected_bus_fee = total_fee - school_fee

        actual_bus_fee_collected = min(max(actual_collected - school_fee, Decimal("0")), expected_bus_fee)

        return self._rounded(school_fee, expected_bus_fee, actual_bus_fee_collected)


class FlatStandardFeePolicy(FeeSplitPolicy):
    """
    Historical: a flat standard school fee of 28, everything above it is bus.
    Bus collection is not capped, so overpayments show up as bus income.
    """

    calc_version = "flatStandardFee_v0"
    description = "School fee = min(total fee, {school_first}), bus = remainder. Payments above the school fee count as bus."
    default_school_first = Decimal("28")
    default_bus_cap = None

    def compute_split(self, total_fee, actual_collected) -> FeeSplit:
        total_fee = to_decimal(total_fee)
        actual_collected = to_decimal(actual_collected)

        school_fee = min(total_fee, self.school_first)
        expected_bus_fee = total_fee - school_fee
        actual_bus_fee_collected = max(actual_collected - school_fee, Decimal("0"))

        return self._rounded(school_fee, expected_bus_fee, actual_bus_fee_collected)


POLICIES: Dict[str, Type[FeeSplitPolicy]] = {
    SchoolFirstPolicy.calc_version: SchoolFirstPolicy,
    FixedBusPortionPolicy.calc_version: FixedBusPortionPolicy,
    FlatStandardFeePolicy.calc_version: FlatStandardFeePolicy,
}


def build_policy(name: str, school_first=None, bus_cap=None) -> FeeSplitPolicy:
    try:
        policy_cls = POLICIES[name]
    except KeyError:
        raise ValueError(f"Unknown fee split policy: {name!r}. Expected one of {sorted(POLICIES)}")
    return policy_cls(school_first=school_first, bus_cap=bus_cap)
