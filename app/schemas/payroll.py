from pydantic import BaseModel


class ComputedPayOut(BaseModel):
    base_pay: float
    night_majoration: float
    sunday_majoration: float
    holiday_majoration: float
    overtime_majoration: float
    presence_responsible_pay: float
    night_presence_allowance: float
    total_pay: float


class PayLineOut(BaseModel):
    key: str
    label: str
    amount: float

    model_config = {"from_attributes": True}
