"""
routers/offers.py — Sales offers: CRUD, pricing preview, send, decide

Business Rules:
- final_amount is priced server-side; any client value is ignored
- Reads first expire draft/sent offers whose valid_until has passed
- POST /send marks the offer sent and optionally e-mails it; the e-mail
  outcome is reported under "delivery" and never reverts the status
- POST /status records accepted / rejected / expired through the workflow

Called by: main.py (router mount)
Depends on: services/offer_service.py, services/pricing.py,
            services/workflow.py, services/mailer.py
"""

from dataclasses import asdict

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import require_user
from ..models import Offer, User
from ..schemas.crm import OfferCreate, OfferSend, OfferStatusChange, OfferUpdate, PriceQuoteRequest
from ..schemas.responses import OkResponse, PriceQuoteResponse
from ..services import offer_service
from ..services.mailer import SmtpMailer, get_mailer
from ..services.pricing import price_breakdown
from ..services.store import EntityStore
from ..services.workflow import expire_overdue_offers

router = APIRouter(tags=["offers"])

# Columns a PUT may set back to null
_NULLABLE = {"contractor_id", "description", "valid_until", "notes", "payment_terms", "category"}


@router.post("/api/offers/quote", response_model=PriceQuoteResponse)
async def quote(payload: PriceQuoteRequest, user: User = Depends(require_user)):
    """Price preview for the offer form; nothing is stored."""
    return asdict(price_breakdown(payload.amount, payload.discount_percent, payload.vat_rate))


@router.get("/api/offers")
async def list_offers(
    status: str | None = None,
    contractor_id: str | None = None,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    expire_overdue_offers(db)
    criteria = []
    if status:
        criteria.append(Offer.status == status)
    if contractor_id:
        criteria.append(Offer.contractor_id == contractor_id)
    rows = EntityStore(db).list(Offer, *criteria, order_by=(Offer.created_at.desc(), Offer.id))
    return [offer_service.offer_to_dict(o) for o in rows]


@router.get("/api/offers/{offer_id}")
async def get_offer(offer_id: str, user: User = Depends(require_user), db: Session = Depends(get_db)):
    expire_overdue_offers(db)
    return offer_service.offer_to_dict(EntityStore(db).get(Offer, offer_id))


@router.post("/api/offers", status_code=201)
async def create_offer(payload: OfferCreate, user: User = Depends(require_user), db: Session = Depends(get_db)):
    offer = offer_service.create_offer(db, payload.model_dump(), user.id)
    return offer_service.offer_to_dict(offer)


@router.put("/api/offers/{offer_id}")
async def update_offer(
    offer_id: str,
    payload: OfferUpdate,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    expire_overdue_offers(db)
    offer = EntityStore(db).get(Offer, offer_id)
    changes = {
        k: v for k, v in payload.model_dump(exclude_unset=True).items()
        if v is not None or k in _NULLABLE
    }
    offer = offer_service.update_offer(db, offer, changes, user.id)
    return offer_service.offer_to_dict(offer)


@router.post("/api/offers/{offer_id}/send")
def send_offer(
    offer_id: str,
    payload: OfferSend | None = Body(None),
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
    mailer: SmtpMailer = Depends(get_mailer),
):
    expire_overdue_offers(db)
    offer = EntityStore(db).get(Offer, offer_id)
    payload = payload or OfferSend()
    offer, delivery = offer_service.send_offer(
        db, offer, mailer, user.id, to=payload.to, subject=payload.subject, message=payload.message
    )
    return {**offer_service.offer_to_dict(offer), "delivery": delivery}


@router.post("/api/offers/{offer_id}/status")
async def change_status(
    offer_id: str,
    payload: OfferStatusChange,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    expire_overdue_offers(db)
    offer = EntityStore(db).get(Offer, offer_id)
    offer = offer_service.decide_offer(db, offer, payload.status, user.id)
    return offer_service.offer_to_dict(offer)


@router.delete("/api/offers/{offer_id}", response_model=OkResponse)
async def delete_offer(offer_id: str, user: User = Depends(require_user), db: Session = Depends(get_db)):
    EntityStore(db).delete(Offer, offer_id)
    return {"ok": True}
