"""
routers/smtp.py — Outbound mail configuration (admin only)

Business Rules:
- Runtime configuration lives in memory and replaces the SMTP_* settings
  until the process restarts
- A blank host clears the configuration (emails then stay in draft)
- The password is never returned

Called by: main.py (router mount)
Depends on: services/mailer.py, dependencies
"""

from fastapi import APIRouter, Depends

from ..dependencies import require_admin
from ..models import User
from ..schemas.emails import SmtpConfigure
from ..services.mailer import SMTPConfig, SmtpMailer, get_mailer

router = APIRouter(tags=["smtp"])


@router.get("/api/smtp/status")
async def smtp_status(admin: User = Depends(require_admin), mailer: SmtpMailer = Depends(get_mailer)):
    return mailer.status()


@router.post("/api/smtp/configure")
async def smtp_configure(
    payload: SmtpConfigure,
    admin: User = Depends(require_admin),
    mailer: SmtpMailer = Depends(get_mailer),
):
    if not payload.host:
        mailer.configure(None)
    else:
        mailer.configure(SMTPConfig(
            host=payload.host,
            port=payload.port,
            user=payload.user,
            password=payload.password,
            secure=payload.secure,
            from_address=payload.from_address,
        ))
    return mailer.status()


@router.post("/api/smtp/test")
def smtp_test(admin: User = Depends(require_admin), mailer: SmtpMailer = Depends(get_mailer)):
    """Open (and close) an authenticated SMTP session."""
    return mailer.test_connection().to_dict()
