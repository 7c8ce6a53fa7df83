from app.models.contract import Contract
from app.models.shift import Shift
from app.models.absence import EmployeeAbsence
from app.models.leave_balance import LeaveBalanceEntry

__all__ = [
    "Contract",
    "Shift",
    "EmployeeAbsence",
    "LeaveBalanceEntry",
]
