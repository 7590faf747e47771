"""
routers/contractors.py — Contractor CRUD

Business Rules:
- name, email and phone are required
- Creating a contractor notifies the creating user
- Deleting a contractor keeps its offers (contractor_id is cleared,
  contractor_name stays)

Called by: main.py (router mount)
Depends on: services/store.py, services/notifications.py, schemas/crm.py
"""

from fastapi import APIRouter, Depends
from loguru import logger
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import require_user
from ..models import Contractor, User
from ..schemas.crm import ContractorCreate, ContractorUpdate
from ..schemas.responses import OkResponse
from ..services.notifications import notify
from ..services.store import EntityStore

router = APIRouter(tags=["contractors"])

_FIELDS = (
    "id", "name", "email", "phone", "nip", "regon", "krs", "account_number",
    "province", "address", "city", "postal_code", "country", "status",
)


def contractor_to_dict(c: Contractor) -> dict:
    d = {f: getattr(c, f) for f in _FIELDS}
    d["created_at"] = c.created_at.isoformat() if c.created_at else None
    return d


@router.get("/api/contractors")
async def list_contractors(
    status: str | None = None,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    criteria = [Contractor.status == status] if status else []
    rows = EntityStore(db).list(Contractor, *criteria, order_by=(Contractor.created_at.desc(), Contractor.id))
    return [contractor_to_dict(c) for c in rows]


@router.get("/api/contractors/{contractor_id}")
async def get_contractor(contractor_id: str, user: User = Depends(require_user), db: Session = Depends(get_db)):
    return contractor_to_dict(EntityStore(db).get(Contractor, contractor_id))


@router.post("/api/contractors", status_code=201)
async def create_contractor(
    payload: ContractorCreate,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    c = EntityStore(db).create(Contractor, payload.model_dump())
    logger.info("Contractor {} '{}' created by {}", c.id, c.name, user.username)
    notify(db, user.id, f"New contractor added: {c.name}", "success")
    return contractor_to_dict(c)


@router.put("/api/contractors/{contractor_id}")
async def update_contractor(
    contractor_id: str,
    payload: ContractorUpdate,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    changes = payload.model_dump(exclude_unset=True)
    # Required columns can't be cleared
    for key in ("name", "email", "phone", "status", "country"):
        if key in changes and changes[key] is None:
            del changes[key]
    c = EntityStore(db).update_by_id(Contractor, contractor_id, changes)
    return contractor_to_dict(c)


@router.delete("/api/contractors/{contractor_id}", response_model=OkResponse)
async def delete_contractor(contractor_id: str, user: User = Depends(require_user), db: Session = Depends(get_db)):
    EntityStore(db).delete(Contractor, contractor_id)
    logger.info("Contractor {} deleted by {}", contractor_id, user.username)
    return {"ok": True}
