"""
routers/stats.py — Dashboard counters and analytics

Called by: main.py (router mount)
Depends on: services/analytics.py
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import require_user
from ..models import User
from ..schemas.responses import StatsResponse
from ..services.analytics import analytics_data, dashboard_stats, parse_range

router = APIRouter(tags=["stats"])


@router.get("/api/stats", response_model=StatsResponse)
async def stats(user: User = Depends(require_user), db: Session = Depends(get_db)):
    return dashboard_stats(db)


@router.get("/api/analytics")
async def analytics(range: str = "30", user: User = Depends(require_user), db: Session = Depends(get_db)):
    return analytics_data(db, parse_range(range))
