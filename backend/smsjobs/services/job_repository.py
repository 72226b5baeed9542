"""
Job Repository - Search Intent to Job Store Query

Translates a ParsedQuery into a PostgREST query against the `jobs` table
and maps rows into display-ready JobSearchResult records.

Fallback:
    When the store is not configured or a call degrades (HTTP error,
    network error, timeout, malformed payload), results come from a fixed
    fixture list filtered with the same predicates as the live query:

    - zip_code exact match
    - trade: canonical name or any alias appears in the title
    - price <= max_price and >= min_price
    - city substring match

    The first MAX_RESULTS matches are returned in declared fixture order.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from smsjobs.schemas import JobRecord, JobSearchResult
from smsjobs.services.degradation import log_degradation
from smsjobs.services.query_parser import ParsedQuery, TRADE_ALIASES
from smsjobs.services.store_client import Params, StoreClient

logger = logging.getLogger(__name__)

JOBS_TABLE = "jobs"
MAX_RESULTS = 5
URGENCY_LEVELS = {"low", "medium", "high", "emergency"}

FIXTURE_JOBS: list[JobRecord] = [
    JobRecord(id="1", title="Fence Repair", address="1234 Oak St", price=350,
              urgency="medium", posted_ago="5m", zip_code="77002", city="houston"),
    JobRecord(id="2", title="Plumbing Leak", address="567 Elm Ave", price=200,
              urgency="high", posted_ago="12m", zip_code="77003", city="houston"),
    JobRecord(id="3", title="AC Repair", address="890 Pine Rd", price=450,
              urgency="emergency", posted_ago="2m", zip_code="75201", city="dallas"),
    JobRecord(id="4", title="Deck Staining", address="321 Maple Dr", price=600,
              urgency="low", posted_ago="1h", zip_code="78701", city="austin"),
    JobRecord(id="5", title="Electrical Outlet", address="654 Cedar Ln", price=150,
              urgency="medium", posted_ago="30m", zip_code="77002", city="houston"),
]


def build_search_params(query: Optional[ParsedQuery], limit: int = MAX_RESULTS) -> Params:
    """PostgREST params for open jobs matching the query, most urgent first."""
    params: Params = [("status", "eq.open"), ("select", "*")]

    if query is not None:
        if query.zip_code:
            params.append(("zip_code", f"eq.{query.zip_code}"))
        if query.trade:
            params.append(("trade", f"ilike.*{query.trade}*"))
        if query.max_price is not None:
            params.append(("estimated_price", f"lte.{query.max_price}"))
        if query.min_price is not None:
            params.append(("estimated_price", f"gte.{query.min_price}"))
        if query.city:
            params.append(("city", f"ilike.*{query.city}*"))

    params.append(("order", "urgency.desc,created_at.desc"))
    params.append(("limit", str(limit)))
    return params


def time_ago(created_at: Optional[str], now: Optional[datetime] = None) -> str:
    """Compact age string: minutes under an hour, hours under a day, else days."""
    if not created_at:
        return "new"
    try:
        posted = datetime.fromisoformat(created_at.replace("Z", "+00:00"))
    except ValueError:
        return "new"
    if posted.tzinfo is None:
        posted = posted.replace(tzinfo=timezone.utc)

    now = now or datetime.now(timezone.utc)
    minutes = max(0, int((now - posted).total_seconds() // 60))

    if minutes < 60:
        return f"{minutes}m"
    if minutes < 1440:
        return f"{minutes // 60}h"
    return f"{minutes // 1440}d"


def row_to_result(row: dict[str, Any], now: Optional[datetime] = None) -> JobSearchResult:
    street = f"{row.get('street_number') or ''} {row.get('street_name') or ''}".strip()
    urgency = row.get("urgency") or "medium"
    return JobSearchResult(
        id=str(row["id"]),
        title=row.get("title") or "Untitled job",
        address=street or row.get("address") or "Address TBD",
        price=int(row.get("estimated_price") or row.get("budget") or 0),
        urgency=urgency if urgency in URGENCY_LEVELS else "medium",
        posted_ago=time_ago(row.get("created_at"), now),
        distance=row.get("distance"),
    )


def matches_trade(title: str, trade: str) -> bool:
    title = title.lower()
    return trade in title or any(alias in title for alias in TRADE_ALIASES.get(trade, []))


def matches_query(job: JobRecord, query: ParsedQuery) -> bool:
    if query.zip_code and job.zip_code != query.zip_code:
        return False
    if query.trade and not matches_trade(job.title, query.trade):
        return False
    if query.max_price is not None and job.price > query.max_price:
        return False
    if query.min_price is not None and job.price < query.min_price:
        return False
    if query.city and query.city not in (job.city or "").lower():
        return False
    return True


class JobRepository:
    """
    Read access to open jobs for SMS search and digests.

    Never raises: any store failure is logged and answered from fixtures.
    """

    def __init__(
        self,
        store: StoreClient,
        fixtures: Optional[list[JobRecord]] = None,
        limit: int = MAX_RESULTS,
    ):
        self.store = store
        self.fixtures = FIXTURE_JOBS if fixtures is None else fixtures
        self.limit = limit

    async def search(self, query: ParsedQuery) -> list[JobSearchResult]:
        return await self._fetch(query)

    async def get_digest(self) -> list[JobSearchResult]:
        return await self._fetch(None)

    async def _fetch(self, query: Optional[ParsedQuery]) -> list[JobSearchResult]:
        result = await self.store.select(JOBS_TABLE, build_search_params(query, self.limit))
        if result.degraded:
            log_degradation("job_store", result)
            return self.fixture_search(query)

        jobs = []
        for row in result.value:
            try:
                jobs.append(row_to_result(row))
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed job row: {e}")
        return jobs[:self.limit]

    def fixture_search(self, query: Optional[ParsedQuery]) -> list[JobSearchResult]:
        matched = [
            job for job in self.fixtures
            if query is None or matches_query(job, query)
        ]
        return [job.to_result() for job in matched[:self.limit]]
