# ruff: noqa: TC003
from __future__ import annotations

import uuid

from pydantic import BaseModel


class LeaveBalanceResponse(BaseModel):
    """Paid leave entitlement and usage for one employee and year."""

    employee_id: uuid.UUID
    employee_name: str
    year: int
    paid_leave_total: float
    paid_leave_used: int
    paid_leave_remaining: float


class LeaveBalanceListResponse(BaseModel):
    """Leave balances of every employee."""

    items: list[LeaveBalanceResponse]
    total: int
