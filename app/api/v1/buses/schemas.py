"""Bus API schemas (camelCase for frontend)."""

from typing import Any, List, Optional

from pydantic import BaseModel, Field


# --- Assignment ---
class AssignBusRequest(BaseModel):
    """Ids are coerced by the service so malformed values get a 400 with a readable message."""

    studentId: Optional[Any] = None
    busId: Optional[Any] = None


class AssignedBus(BaseModel):
    id: int
    name: str
    route: Optional[str] = None
    plate: Optional[str] = None
    driver: Optional[str] = Field(None, description="Driver full name")


class AssignedStudent(BaseModel):
    id: int
    name: str
    bus: Optional[AssignedBus] = None


class AssignBusResponse(BaseModel):
    message: str
    previousBusId: Optional[int] = None
    assignedBusId: int
    student: AssignedStudent


# --- Bus CRUD ---
class BusCreate(BaseModel):
    name: Optional[str] = None
    route: Optional[str] = None
    plate: Optional[str] = None
    type: Optional[str] = None
    color: Optional[str] = None
    seats: Optional[int] = None
    capacity: Optional[int] = None
    driverId: Optional[int] = None


class BusUpdate(BusCreate):
    """Only fields present in the body are written."""


class BusRecord(BaseModel):
    id: int
    name: str
    route: Optional[str] = None
    plate: Optional[str] = None
    type: Optional[str] = None
    color: Optional[str] = None
    seats: Optional[int] = None
    capacity: Optional[int] = None
    driverId: Optional[int] = None


class DriverName(BaseModel):
    fullName: str


class RosterStudent(BaseModel):
    id: int
    fullname: str
    classId: Optional[int] = None


class BusWithRoster(BusRecord):
    driver: Optional[DriverName] = None
    students: List[RosterStudent] = []


class BusResponse(BaseModel):
    success: bool = True
    bus: BusRecord


class BusDetailResponse(BaseModel):
    success: bool = True
    bus: BusWithRoster


class BusListResponse(BaseModel):
    success: bool = True
    buses: List[BusWithRoster]


class MessageResponse(BaseModel):
    success: bool = True
    message: str


# --- Finance summary ---
class FeePolicyInfo(BaseModel):
    calcVersion: str
    description: str
    SCHOOL_FIRST: Optional[float] = None
    BUS_CAP: Optional[float] = None


class StudentFeeDebug(BaseModel):
    calcVersion: str
    actualCollected: float
    SCHOOL_FIRST: Optional[float] = None
    BUS_CAP: Optional[float] = None


class StudentFeeBreakdown(BaseModel):
    id: int
    name: str
    district: str = "Unknown"
    totalFee: float
    schoolFee: float
    expectedBusFee: float
    actualBusFeeCollected: float
    unpaidBusFee: float
    debug: Optional[StudentFeeDebug] = Field(None, alias="__debug")

    class Config:
        populate_by_name = True


class BusDriverInfo(BaseModel):
    id: int
    name: str
    salary: float


class BusFinanceSummary(BaseModel):
    busId: int
    name: str
    route: Optional[str] = None
    plate: Optional[str] = None
    driver: Optional[BusDriverInfo] = None
    studentCount: int
    totalBusFeeCollected: float
    expectedBusIncome: float
    collectionGap: float
    status: str = Field(..., description="Profit or Shortage")
    profitOrLossAmount: float
    students: List[StudentFeeBreakdown]


class BusFinanceReport(BaseModel):
    success: bool = True
    policy: FeePolicyInfo
    month: int
    year: int
    totalBuses: int
    totalStudentsWithBus: int
    totalBusFeeCollected: float
    expectedBusIncome: float
    busFeeCollectionGap: float
    totalBusSalary: float
    profitOrLoss: float
    busSummaries: List[BusFinanceSummary]


# --- Employees ---
class BusEmployee(BaseModel):
    id: int
    fullName: str
    salary: Optional[float] = None
    jobTitle: Optional[str] = None


class BusEmployeeListResponse(BaseModel):
    success: bool = True
    employees: List[BusEmployee]
