"""
Worker task API routes.
Workers only see and touch tasks they are assigned to.
"""
import uuid
from typing import List

from fastapi import APIRouter, Depends, File, UploadFile
from sqlmodel.ext.asyncio.session import AsyncSession

from kvb_crm.database import get_session
from kvb_crm.api.deps import get_current_worker
from kvb_crm.core.exceptions import raise_bad_request
from kvb_crm.models.user import Worker
from kvb_crm.services.task_service import TaskService
from kvb_crm.schemas.task import (
    TaskResponse, TaskStatusUpdate, TaskCommentCreate, TaskCommentResponse, TaskUploadResponse
)

router = APIRouter(prefix="/api/tasks", tags=["tasks"])

MAX_UPLOAD_FILES = 10


@router.get("/worker/assigned", response_model=List[TaskResponse])
async def list_assigned_tasks(
    current_worker: Worker = Depends(get_current_worker),
    session: AsyncSession = Depends(get_session)
):
    """Tasks assigned to the signed-in worker, soonest due first."""
    return await TaskService(session).list_worker_tasks(current_worker)


@router.put("/worker/complete/{task_id}", response_model=TaskResponse)
async def complete_task(
    task_id: uuid.UUID,
    current_worker: Worker = Depends(get_current_worker),
    session: AsyncSession = Depends(get_session)
):
    return await TaskService(session).mark_complete(task_id, current_worker)


@router.put("/worker/update-status/{task_id}", response_model=TaskResponse)
async def update_task_status(
    task_id: uuid.UUID,
    update: TaskStatusUpdate,
    current_worker: Worker = Depends(get_current_worker),
    session: AsyncSession = Depends(get_session)
):
    """Change the status of an assigned task, with an optional comment."""
    return await TaskService(session).update_status(
        task_id, current_worker, update.status, update.comment
    )


@router.post("/{task_id}/upload", response_model=TaskUploadResponse)
async def upload_task_files(
    task_id: uuid.UUID,
    files: List[UploadFile] = File(default=[]),
    current_worker: Worker = Depends(get_current_worker),
    session: AsyncSession = Depends(get_session)
):
    """Attach up to 10 files to an assigned task; an empty request changes nothing."""
    if len(files) > MAX_UPLOAD_FILES:
        raise_bad_request(f"At most {MAX_UPLOAD_FILES} files can be uploaded at once")

    attachments = await TaskService(session).upload_files(task_id, current_worker, files)
    return {"message": "Files uploaded successfully", "attachments": attachments}


@router.post("/{task_id}/comments", response_model=TaskCommentResponse, status_code=201)
async def add_task_comment(
    task_id: uuid.UUID,
    comment: TaskCommentCreate,
    current_worker: Worker = Depends(get_current_worker),
    session: AsyncSession = Depends(get_session)
):
    stored = await TaskService(session).add_comment(task_id, current_worker, comment.comment)
    return {"message": "Comment added successfully", "comment": stored}
