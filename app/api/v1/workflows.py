"""
Workflow (HR event log) endpoints
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.deps import get_db
from app.core.errors import NotFoundError
from app.models.workflow import WorkflowStatus
from app.schemas.workflow import WorkflowCreate, WorkflowOut
from app.services.workflow_service import (
    create_workflow,
    list_workflows,
    get_workflow,
    approve_workflow,
    reject_workflow,
    complete_workflow,
)


router = APIRouter()


@router.post("", response_model=WorkflowOut, status_code=201)
async def create_workflow_endpoint(
    workflow_data: WorkflowCreate,
    db: Session = Depends(get_db),
):
    """Log a workflow entry by hand"""
    return create_workflow(db, workflow_data)


@router.get("", response_model=List[WorkflowOut])
async def list_workflows_endpoint(
    employee_id: Optional[str] = Query(None, description="Only entries for this employee"),
    status: Optional[WorkflowStatus] = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db),
):
    """List workflow entries, newest first"""
    return list_workflows(db, employee_id=employee_id, status=status, skip=skip, limit=limit)


@router.get("/{workflow_id}", response_model=WorkflowOut)
async def get_workflow_endpoint(
    workflow_id: int,
    db: Session = Depends(get_db),
):
    """Get a workflow entry by ID"""
    workflow = get_workflow(db, workflow_id)
    if not workflow:
        raise NotFoundError(f"Workflow {workflow_id} not found")
    return workflow


@router.put("/{workflow_id}/approve", response_model=WorkflowOut)
async def approve_workflow_endpoint(
    workflow_id: int,
    db: Session = Depends(get_db),
):
    """Approve a pending workflow"""
    return approve_workflow(db, workflow_id)


@router.put("/{workflow_id}/reject", response_model=WorkflowOut)
async def reject_workflow_endpoint(
    workflow_id: int,
    db: Session = Depends(get_db),
):
    """Reject a pending workflow"""
    return reject_workflow(db, workflow_id)


@router.put("/{workflow_id}/complete", response_model=WorkflowOut)
async def complete_workflow_endpoint(
    workflow_id: int,
    db: Session = Depends(get_db),
):
    """Mark a pending workflow completed"""
    return complete_workflow(db, workflow_id)
