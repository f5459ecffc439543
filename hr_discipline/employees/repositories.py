from __future__ import annotations

import datetime as dt
from typing import Protocol

from hr_discipline.employees.models import Employee
from hr_discipline.exceptions import NotFoundError


class EmployeeRepository(Protocol):
    def get(self, employee_id: int) -> Employee:
        raise NotImplementedError

    def lock(self, employee_id: int) -> Employee:
        """Return the employee holding a row lock for the current transaction."""

        raise NotImplementedError

    def terminate(self, employee_id: int, on_date: dt.date) -> Employee:
        raise NotImplementedError


class DjangoEmployeeRepository:
    def get(self, employee_id: int) -> Employee:
        try:
            return Employee.objects.get(pk=employee_id)
        except Employee.DoesNotExist as exc:
            msg = f"Employee {employee_id} not found"
            raise NotFoundError(msg) from exc

    def lock(self, employee_id: int) -> Employee:
        try:
            return Employee.objects.select_for_update().get(pk=employee_id)
        except Employee.DoesNotExist as exc:
            msg = f"Employee {employee_id} not found"
            raise NotFoundError(msg) from exc

    def terminate(self, employee_id: int, on_date: dt.date) -> Employee:
        employee = self.lock(employee_id)
        employee.status = Employee.Status.TERMINATED
        employee.is_active = False
        employee.termination_date = on_date
        employee.save(
            update_fields=["status", "is_active", "termination_date", "updated_at"]
        )
        return employee
