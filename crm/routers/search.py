"""
routers/search.py — Global search across all record types

Called by: main.py (router mount)
Depends on: services/search.py
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import require_user
from ..models import User
from ..schemas.responses import SearchResponse
from ..services.search import global_search, parse_types

router = APIRouter(tags=["search"])


@router.get("/api/search", response_model=SearchResponse)
async def search(
    q: str = "",
    types: str | None = None,
    status: str | None = None,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    results = global_search(db, q, user.id, parse_types(types), status=status or None)
    return {"query": q, "total": len(results), "results": [r.to_dict() for r in results]}
