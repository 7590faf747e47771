"""
routers/tasks.py — Calendar tasks of the current user

Business Rules:
- Every task belongs to the user who created it; other users' tasks are 404
- Status changes (PUT with a new status, or /toggle) go through the task
  workflow; completing a task notifies its owner
- Listing is ordered by date, then time

Called by: main.py (router mount)
Depends on: services/workflow.py, services/notifications.py, schemas/crm.py
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import require_user
from ..models import Task, User
from ..schemas.crm import TaskCreate, TaskUpdate
from ..schemas.responses import OkResponse
from ..services.errors import NotFoundError
from ..services.notifications import notify
from ..services.store import EntityStore
from ..services.workflow import apply_task_transition, toggle_task

router = APIRouter(tags=["tasks"])


def task_to_dict(t: Task) -> dict:
    return {
        "id": t.id,
        "title": t.title,
        "date": t.date,
        "time": t.time,
        "priority": t.priority,
        "status": t.status,
        "completed_at": t.completed_at.isoformat() if t.completed_at else None,
        "user_id": t.user_id,
        "created_at": t.created_at.isoformat() if t.created_at else None,
    }


def _own_task(db: Session, task_id: str, user: User) -> Task:
    task = db.get(Task, task_id)
    if task is None or task.user_id != user.id:
        raise NotFoundError("Task", task_id)
    return task


def _after_status_change(db: Session, task: Task, user: User) -> None:
    if task.status == "completed":
        notify(db, user.id, f"Task completed: {task.title}", "success")


@router.get("/api/tasks")
async def list_tasks(
    status: str | None = None,
    date: str | None = None,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    criteria = [Task.user_id == user.id]
    if status:
        criteria.append(Task.status == status)
    if date:
        criteria.append(Task.date == date)
    rows = EntityStore(db).list(Task, *criteria, order_by=(Task.date, Task.time, Task.created_at))
    return [task_to_dict(t) for t in rows]


@router.get("/api/tasks/{task_id}")
async def get_task(task_id: str, user: User = Depends(require_user), db: Session = Depends(get_db)):
    return task_to_dict(_own_task(db, task_id, user))


@router.post("/api/tasks", status_code=201)
async def create_task(payload: TaskCreate, user: User = Depends(require_user), db: Session = Depends(get_db)):
    data = payload.model_dump()
    target = data.pop("status")
    store = EntityStore(db)
    task = store.create(Task, {**data, "user_id": user.id, "status": "pending"}, commit=False)
    if target != task.status:
        apply_task_transition(task, target)
    db.commit()
    db.refresh(task)
    notify(db, user.id, f"New task: {task.title} ({task.date} {task.time})", "info")
    return task_to_dict(task)


@router.put("/api/tasks/{task_id}")
async def update_task(
    task_id: str,
    payload: TaskUpdate,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    task = _own_task(db, task_id, user)
    changes = {k: v for k, v in payload.model_dump(exclude_unset=True).items() if v is not None}
    target = changes.pop("status", None)

    EntityStore(db).update(task, changes, commit=False)
    transitioned = target is not None and target != task.status
    if transitioned:
        apply_task_transition(task, target)
    db.commit()
    db.refresh(task)
    if transitioned:
        _after_status_change(db, task, user)
    return task_to_dict(task)


@router.post("/api/tasks/{task_id}/toggle")
async def toggle(task_id: str, user: User = Depends(require_user), db: Session = Depends(get_db)):
    task = toggle_task(_own_task(db, task_id, user))
    db.commit()
    db.refresh(task)
    _after_status_change(db, task, user)
    return task_to_dict(task)


@router.delete("/api/tasks/{task_id}", response_model=OkResponse)
async def delete_task(task_id: str, user: User = Depends(require_user), db: Session = Depends(get_db)):
    db.delete(_own_task(db, task_id, user))
    db.commit()
    return {"ok": True}
