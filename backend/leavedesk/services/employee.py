# ruff: noqa: TC003
from __future__ import annotations

import uuid
from collections.abc import Callable
from datetime import date
from typing import Protocol, runtime_checkable

from pydantic import BaseModel


class EmployeeInfo(BaseModel):
    """Employee metadata from the Employee Directory."""

    id: uuid.UUID
    first_name: str
    last_name: str
    email: str | None = None
    department: str | None = None
    manager_name: str | None = None
    role: str | None = None
    birth_date: date | None = None  # for age-based entitlement
    start_date: date | None = None  # for seniority and proration

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


EmployeeLookup = Callable[[uuid.UUID], EmployeeInfo | None]


@runtime_checkable
class EmployeeDirectory(Protocol):
    """Interface for the Employee Directory."""

    async def get_employee(self, employee_id: uuid.UUID) -> EmployeeInfo | None:
        """Fetch employee metadata. Returns None if not found."""
        ...

    async def list_employees(self) -> list[EmployeeInfo]:
        """List all employees."""
        ...


class InMemoryEmployeeDirectory:
    """In-memory stub implementation for development."""

    def __init__(self) -> None:
        self._employees: dict[uuid.UUID, EmployeeInfo] = {}

    def seed(self, employee: EmployeeInfo) -> None:
        """Seed an employee for testing."""
        self._employees[employee.id] = employee

    async def get_employee(self, employee_id: uuid.UUID) -> EmployeeInfo | None:
        """Fetch employee metadata. Returns None if not found."""
        return self._employees.get(employee_id)

    async def list_employees(self) -> list[EmployeeInfo]:
        """List all employees."""
        return list(self._employees.values())


_employee_directory: EmployeeDirectory = InMemoryEmployeeDirectory()


def get_employee_directory() -> EmployeeDirectory:
    """FastAPI dependency for the Employee Directory."""
    return _employee_directory


def set_employee_directory(directory: EmployeeDirectory) -> None:
    """Override the directory (for testing or production wiring)."""
    global _employee_directory
    _employee_directory = directory


async def build_employee_lookup(directory: EmployeeDirectory) -> EmployeeLookup:
    """Snapshot the directory into a synchronous lookup for the pure analyses."""
    employees = {employee.id: employee for employee in await directory.list_employees()}
    return employees.get


def headcount_by_department(employees: list[EmployeeInfo]) -> dict[str, int]:
    """Count employees per department, skipping those without one."""
    counts: dict[str, int] = {}
    for employee in employees:
        if employee.department:
            counts[employee.department] = counts.get(employee.department, 0) + 1
    return counts
