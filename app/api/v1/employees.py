"""
Employee lifecycle endpoints
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from app.core.deps import get_db
from app.core.errors import NotFoundError
from app.models.employee import EmployeeStatus
from app.schemas.employee import (
    EmployeeCreate,
    EmployeeUpdate,
    EmployeeOut,
    NextEmployeeIdOut,
)
from app.services.employee_service import (
    create_employee,
    list_employees,
    get_employee,
    update_employee,
    delete_employee,
)
from app.services.identifier_service import next_employee_id

router = APIRouter()


@router.post("", response_model=EmployeeOut, status_code=201)
async def create_employee_endpoint(
    employee_data: EmployeeCreate,
    db: Session = Depends(get_db),
):
    """Onboard a new employee"""
    return create_employee(db, employee_data)


@router.get("", response_model=List[EmployeeOut])
async def list_employees_endpoint(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    department_id: Optional[int] = Query(None),
    status: Optional[EmployeeStatus] = Query(None),
    db: Session = Depends(get_db),
):
    """List employees, optionally by department and status"""
    return list_employees(
        db,
        skip=skip,
        limit=limit,
        department_id=department_id,
        status=status
    )


@router.get("/next-id", response_model=NextEmployeeIdOut)
async def next_employee_id_endpoint(db: Session = Depends(get_db)):
    """Preview the identifier the next onboarding would get"""
    return NextEmployeeIdOut(next_id=next_employee_id(db))


@router.get("/{employee_id}", response_model=EmployeeOut)
async def get_employee_endpoint(
    employee_id: str,
    db: Session = Depends(get_db),
):
    """Get an employee by ID"""
    employee = get_employee(db, employee_id)
    if not employee:
        raise NotFoundError(f"Employee with id {employee_id} not found")
    return employee


@router.patch("/{employee_id}", response_model=EmployeeOut)
async def update_employee_endpoint(
    employee_id: str,
    employee_data: EmployeeUpdate,
    db: Session = Depends(get_db),
):
    """Update an employee; only fields present in the body change"""
    return update_employee(db, employee_id, employee_data)


@router.delete("/{employee_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_employee_endpoint(
    employee_id: str,
    db: Session = Depends(get_db),
):
    """
    Offboard an employee

    Returns 204 No Content on successful deletion.
    Returns 404 if employee not found.
    """
    delete_employee(db, employee_id)
    return None
