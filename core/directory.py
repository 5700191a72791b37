import uuid
from typing import Dict, List, Optional

from core.exceptions import NotFoundError, ValidationError
from core.logger import mask_phone, setup_logger
from core.schema import Employee

logger = setup_logger(__name__)


class EmployeeDirectory:
    """In-memory employee contact list. Entries are kept in insertion order."""

    def __init__(self):
        self._employees: Dict[str, Employee] = {}

    def add(self, name: str, phone: str, email: Optional[str] = None) -> Employee:
        """Add an employee. Name and phone are required."""
        name = (name or "").strip()
        phone = (phone or "").strip()
        if not name or not phone:
            raise ValidationError(
                "Employee name and phone are required",
                details={"name": bool(name), "phone": bool(phone)}
            )

        employee = Employee(
            id=f"emp-{uuid.uuid4().hex[:12]}",
            name=name,
            phone=phone,
            email=email.strip() if email else None,
        )
        self._employees[employee.id] = employee
        logger.info(f"Added employee {employee.id} ({mask_phone(phone)})")
        return employee

    def get(self, employee_id: str) -> Employee:
        """Get an employee by id."""
        try:
            return self._employees[employee_id]
        except KeyError:
            raise NotFoundError(
                f"Employee not found: {employee_id}",
                details={"employee_id": employee_id}
            )

    def remove(self, employee_id: str) -> None:
        """Remove an employee by id."""
        if self._employees.pop(employee_id, None) is None:
            raise NotFoundError(
                f"Employee not found: {employee_id}",
                details={"employee_id": employee_id}
            )
        logger.info(f"Removed employee {employee_id}")

    def list(self, search: Optional[str] = None) -> List[Employee]:
        """
        List employees, optionally filtered.

        Args:
            search: Matches a case-insensitive substring of the name or a
                substring of the phone number

        Returns:
            Matching employees in insertion order
        """
        employees = list(self._employees.values())
        if not search:
            return employees

        term = search.lower()
        return [
            emp for emp in employees
            if term in emp.name.lower() or search in emp.phone
        ]

    def __len__(self) -> int:
        return len(self._employees)
