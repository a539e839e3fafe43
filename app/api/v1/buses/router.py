"""Buses router: student assignment, bus CRUD, finance summary, unused drivers."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse

from app.core.exceptions import ServiceError

from .dependencies import get_fee_policy, get_transport_repository
from .fee_policy import FeeSplitPolicy
from .repository import TransportRepository
from .schemas import (
    AssignBusRequest,
    AssignBusResponse,
    BusCreate,
    BusDetailResponse,
    BusEmployeeListResponse,
    BusFinanceReport,
    BusListResponse,
    BusResponse,
    BusUpdate,
    MessageResponse,
)
from . import service

router = APIRouter(prefix="/api/v1/buses", tags=["buses"])

CALC_VERSION_HEADER = "x-calc-version"


# --- Assignment ---
@router.post("/assign", response_model=AssignBusResponse)
async def assign_student_to_bus(
    payload: AssignBusRequest,
    repo: TransportRepository = Depends(get_transport_repository),
) -> AssignBusResponse:
    try:
        return await service.assign_student_to_bus(repo, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


# --- Bus CRUD ---
@router.post("", response_model=BusResponse, status_code=status.HTTP_201_CREATED)
async def create_bus(
    payload: BusCreate,
    repo: TransportRepository = Depends(get_transport_repository),
) -> BusResponse:
    try:
        bus = await service.create_bus(repo, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return BusResponse(bus=bus)


@router.get("", response_model=BusListResponse)
async def list_buses(
    repo: TransportRepository = Depends(get_transport_repository),
) -> BusListResponse:
    try:
        buses = await service.list_buses(repo)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return BusListResponse(buses=buses)


@router.get("/employees/unused", response_model=BusEmployeeListResponse)
async def list_unused_bus_employees(
    repo: TransportRepository = Depends(get_transport_repository),
) -> BusEmployeeListResponse:
    try:
        employees = await service.list_unused_bus_employees(repo)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return BusEmployeeListResponse(employees=employees)


# --- Finance ---
@router.get("/finance/detailed-v2", response_model=BusFinanceReport)
async def get_bus_finance_summary(
    month: Optional[str] = Query(None, description="Month number (1-12)"),
    year: Optional[str] = Query(None, description="Four digit year"),
    debug: Optional[str] = Query(None, description="1 to include per-student calculation details"),
    repo: TransportRepository = Depends(get_transport_repository),
    policy: FeeSplitPolicy = Depends(get_fee_policy),
) -> JSONResponse:
    try:
        month_num, year_num = service.parse_period(month, year)
        report = await service.get_finance_summary(
            repo, policy, month_num, year_num, debug=debug == "1"
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    exclude = None
    if debug != "1":
        exclude = {"busSummaries": {"__all__": {"students": {"__all__": {"debug"}}}}}
    return JSONResponse(
        content=report.model_dump(mode="json", by_alias=True, exclude=exclude),
        headers={CALC_VERSION_HEADER: policy.calc_version},
    )


# --- Single bus ---
@router.get("/{bus_id}", response_model=BusDetailResponse)
async def get_bus(
    bus_id: int,
    repo: TransportRepository = Depends(get_transport_repository),
) -> BusDetailResponse:
    try:
        bus = await service.get_bus(repo, bus_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    if not bus:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Bus not found")
    return BusDetailResponse(bus=bus)


@router.put("/{bus_id}", response_model=BusResponse)
async def update_bus(
    bus_id: int,
    payload: BusUpdate,
    repo: TransportRepository = Depends(get_transport_repository),
) -> BusResponse:
    try:
        bus = await service.update_bus(repo, bus_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return BusResponse(bus=bus)


@router.delete("/{bus_id}", response_model=MessageResponse)
async def delete_bus(
    bus_id: int,
    repo: TransportRepository = Depends(get_transport_repository),
) -> MessageResponse:
    try:
        await service.delete_bus(repo, bus_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return MessageResponse(message="Bus deleted successfully")
