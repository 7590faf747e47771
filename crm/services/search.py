"""Global search — one query across contractors, tasks, offers, emails, tickets.

Each searchable record type is a SearchSource: the model, the fields matched
against the query, whether results are scoped to the requesting user, and a
projection into the common SearchResult shape.

Business Rules:
- Queries shorter than settings.search_min_query_length return [] without
  touching the database
- Matching is a case-insensitive substring test (str.casefold, so Polish
  diacritics compare correctly regardless of the database collation)
- Tasks and emails only match the requesting user's own records
- Sources are scanned in SOURCE_ORDER, records in insertion order; the
  combined list is capped at settings.search_result_limit
- Unknown type names are ignored
- Overdue offers are expired before offers are searched, so status filters
  see the same state as /api/offers

Called by: routers/search.py
Depends on: models, config, services/workflow.py
"""

from collections.abc import Callable, Iterable
from dataclasses import asdict, dataclass

from loguru import logger
from sqlalchemy.orm import Session

from ..config import settings
from ..models import Contractor, Email, Offer, SupportTicket, Task
from .workflow import expire_overdue_offers

SOURCE_ORDER = ("contractor", "task", "offer", "email", "support")


@dataclass(frozen=True)
class SearchResult:
    id: str
    type: str
    title: str
    subtitle: str
    details: str
    status: str

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class SearchSource:
    type: str
    model: type
    fields: tuple[str, ...]
    project: Callable[[object], SearchResult]
    user_scoped: bool = False


# ── Projections ───────────────────────────────────────────────────────


def _project_contractor(c: Contractor) -> SearchResult:
    return SearchResult(
        id=c.id,
        type="contractor",
        title=c.name,
        subtitle=c.email or c.phone or "",
        details=f"NIP: {c.nip or 'n/a'} • Status: {c.status}",
        status=c.status,
    )


def _project_task(t: Task) -> SearchResult:
    return SearchResult(
        id=t.id,
        type="task",
        title=t.title,
        subtitle=f"{t.date} at {t.time}",
        details=f"Priority: {t.priority} • Status: {t.status}",
        status=t.status,
    )


def _project_offer(o: Offer) -> SearchResult:
    return SearchResult(
        id=o.id,
        type="offer",
        title=o.title or "Offer",
        subtitle=f"For: {o.contractor_name or 'unknown contractor'}",
        details=f"Amount: {o.final_amount} {o.currency} • Status: {o.status}",
        status=o.status,
    )


def _project_email(e: Email) -> SearchResult:
    return SearchResult(
        id=e.id,
        type="email",
        title=e.subject,
        subtitle=f"To: {e.to}",
        details=f"Status: {e.status}",
        status=e.status,
    )


def _project_ticket(t: SupportTicket) -> SearchResult:
    issue = t.issue or ""
    snippet = issue[:100] + ("..." if len(issue) > 100 else "")
    return SearchResult(
        id=t.id,
        type="support",
        title=f"Ticket from {t.user}",
        subtitle=t.email or "",
        details=f"{snippet} • Status: {t.status} • Priority: {t.priority}",
        status=t.status,
    )


SOURCES: dict[str, SearchSource] = {
    "contractor": SearchSource("contractor", Contractor, ("name", "email", "phone", "nip"), _project_contractor),
    "task": SearchSource("task", Task, ("title",), _project_task, user_scoped=True),
    "offer": SearchSource("offer", Offer, ("title", "contractor_name", "description"), _project_offer),
    "email": SearchSource("email", Email, ("subject", "to", "content"), _project_email, user_scoped=True),
    "support": SearchSource("support", SupportTicket, ("user", "issue", "email"), _project_ticket),
}


# ── Search ────────────────────────────────────────────────────────────


def parse_types(raw: str | None) -> list[str]:
    """'contractor,offer' → ['contractor', 'offer']; empty → every type."""
    if not raw or not raw.strip():
        return list(SOURCE_ORDER)
    return [t.strip().lower() for t in raw.split(",") if t.strip()]


def _matches(record, fields: Iterable[str], needle: str) -> bool:
    for name in fields:
        value = getattr(record, name, None)
        if value and needle in str(value).casefold():
            return True
    return False


def global_search(
    db: Session,
    query: str | None,
    user_id: str | None,
    types: Iterable[str] | None = None,
    status: str | None = None,
    limit: int | None = None,
) -> list[SearchResult]:
    term = (query or "").strip()
    if len(term) < settings.search_min_query_length:
        return []

    limit = limit or settings.search_result_limit
    requested = set(types) if types is not None else set(SOURCE_ORDER)
    needle = term.casefold()
    results: list[SearchResult] = []

    if "offer" in requested:
        expire_overdue_offers(db)

    for type_name in SOURCE_ORDER:
        if type_name not in requested:
            continue
        source = SOURCES[type_name]
        q = db.query(source.model)
        if source.user_scoped:
            q = q.filter(source.model.user_id == user_id)
        q = q.order_by(source.model.created_at.asc(), source.model.id.asc())

        for record in q:
            if not _matches(record, source.fields, needle):
                continue
            result = source.project(record)
            if status and result.status != status:
                continue
            results.append(result)
            if len(results) >= limit:
                logger.debug("Search '{}' hit the {} result cap", term, limit)
                return results

    return results
