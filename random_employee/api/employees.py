"""Employee resource router.

In-memory CRUD over a seeded employee list plus a `/random` endpoint.
The store lives on `app.state.employee_store` so each application built by
`create_app` has its own copy.
"""

from __future__ import annotations

import random
import threading
from typing import Dict, Iterable, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from pydantic import BaseModel, Field

from random_employee.observability.logging import get_logger

logger = get_logger(__name__)


class EmployeeCreate(BaseModel):
    """Request body for creating an employee."""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    title: str = Field("Engineer", min_length=1, max_length=100)


class Employee(EmployeeCreate):
    """Stored employee record."""

    id: int = Field(..., ge=1)


DEFAULT_EMPLOYEES = (
    EmployeeCreate(first_name="Ada", last_name="Lovelace", title="Analyst"),
    EmployeeCreate(first_name="Grace", last_name="Hopper", title="Rear Admiral"),
    EmployeeCreate(first_name="Alan", last_name="Turing", title="Cryptanalyst"),
    EmployeeCreate(first_name="Katherine", last_name="Johnson", title="Mathematician"),
)


class EmployeeStore:
    """Thread-safe in-memory employee store."""

    def __init__(
        self,
        seed: Optional[Iterable[EmployeeCreate]] = None,
        rng: Optional[random.Random] = None,
    ):
        self._employees: Dict[int, Employee] = {}
        self._next_id = 1
        self._lock = threading.Lock()
        self._rng = rng or random.Random()
        for item in DEFAULT_EMPLOYEES if seed is None else seed:
            self.add(item)

    def list(self) -> List[Employee]:
        with self._lock:
            return list(self._employees.values())

    def get(self, employee_id: int) -> Optional[Employee]:
        with self._lock:
            return self._employees.get(employee_id)

    def add(self, data: EmployeeCreate) -> Employee:
        with self._lock:
            employee = Employee(id=self._next_id, **data.model_dump())
            self._employees[employee.id] = employee
            self._next_id += 1
            return employee

    def remove(self, employee_id: int) -> bool:
        with self._lock:
            return self._employees.pop(employee_id, None) is not None

    def random(self) -> Optional[Employee]:
        with self._lock:
            if not self._employees:
                return None
            return self._rng.choice(list(self._employees.values()))


def get_store(request: Request) -> EmployeeStore:
    return request.app.state.employee_store


router = APIRouter(prefix="/employees", tags=["employees"])


@router.get("", response_model=List[Employee])
async def list_employees(store: EmployeeStore = Depends(get_store)) -> List[Employee]:
    return store.list()


@router.get("/random", response_model=Employee)
async def get_random_employee(store: EmployeeStore = Depends(get_store)) -> Employee:
    """Return a randomly chosen employee."""
    employee = store.random()
    if employee is None:
        raise HTTPException(status_code=404, detail="No employees available")
    return employee


@router.get("/{employee_id}", response_model=Employee)
async def get_employee(
    employee_id: int, store: EmployeeStore = Depends(get_store)
) -> Employee:
    employee = store.get(employee_id)
    if employee is None:
        raise HTTPException(status_code=404, detail=f"Employee {employee_id} not found")
    return employee


@router.post("", response_model=Employee, status_code=status.HTTP_201_CREATED)
async def create_employee(
    body: EmployeeCreate, store: EmployeeStore = Depends(get_store)
) -> Employee:
    employee = store.add(body)
    logger.info("employee_created", employee_id=employee.id)
    return employee


@router.delete("/{employee_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_employee(
    employee_id: int, store: EmployeeStore = Depends(get_store)
) -> Response:
    if not store.remove(employee_id):
        raise HTTPException(status_code=404, detail=f"Employee {employee_id} not found")
    logger.info("employee_deleted", employee_id=employee_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["Employee", "EmployeeCreate", "EmployeeStore", "router"]
