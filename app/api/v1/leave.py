import uuid

from fastapi import APIRouter, HTTPException

from app.api.deps import DB
from app.core.enums import FamilyEventType
from app.schemas.leave import FamilyEventOut, LeaveBalanceOut
from app.services.data_service import get_leave_balance
from app.services.leave_service import FAMILY_EVENT_LABELS, family_event_days, leave_year_bounds

router = APIRouter(tags=["leave"])


@router.get("/leave-balances/{contract_id}/{leave_year}", response_model=LeaveBalanceOut)
async def get_balance(contract_id: uuid.UUID, leave_year: str, db: DB):
    try:
        leave_year_bounds(leave_year)
    except ValueError:
        raise HTTPException(status_code=422, detail="Période de congés invalide (format AAAA-AAAA)")

    balance = await get_leave_balance(db, contract_id, leave_year)
    if balance is None:
        raise HTTPException(status_code=404, detail="Contrat introuvable")
    return LeaveBalanceOut.model_validate(balance, from_attributes=True)


@router.get("/family-events", response_model=list[FamilyEventOut])
async def list_family_events():
    return [
        FamilyEventOut(kind=kind, label=FAMILY_EVENT_LABELS[kind], days=family_event_days(kind))
        for kind in FamilyEventType
    ]


@router.get("/family-events/{kind}", response_model=FamilyEventOut)
async def get_family_event(kind: FamilyEventType):
    return FamilyEventOut(kind=kind, label=FAMILY_EVENT_LABELS[kind], days=family_event_days(kind))
