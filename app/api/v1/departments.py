"""
Department read endpoints (employee_count is repaired on read)
"""
from typing import List
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from app.core.deps import get_db
from app.core.errors import NotFoundError
from app.schemas.department import DepartmentOut
from app.services.department_service import list_departments, get_department

router = APIRouter()


@router.get("", response_model=List[DepartmentOut])
async def list_departments_endpoint(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db),
):
    """List departments"""
    return list_departments(db, skip=skip, limit=limit)


@router.get("/{department_id}", response_model=DepartmentOut)
async def get_department_endpoint(
    department_id: int,
    db: Session = Depends(get_db),
):
    """Get a department by ID"""
    department = get_department(db, department_id)
    if not department:
        raise NotFoundError(f"Department with id {department_id} not found")
    return department
