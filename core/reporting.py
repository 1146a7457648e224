"""
Admin reports over paid jobs.

Both reports follow the same pipeline: sum paid job prices per contract
within a payment-date window, fold the contract totals onto a profile
(the contractor or the client), then rank. No locks are taken.
"""
import math
import time
from collections import defaultdict
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from config import get_settings
from core.errors import BadRequest
from database.repositories import ContractRepository, JobRepository, ProfileRepository
from monitoring.metrics import metrics

logger = structlog.get_logger(__name__)


def parse_date(value: Optional[str], field: str) -> Optional[datetime]:
    """
    Parse an ISO 8601 date or datetime string into an aware UTC datetime.

    Values without an offset are taken as UTC. Empty values mean no bound.

    Raises:
        BadRequest: If the string cannot be parsed
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            raise BadRequest(f"Invalid {field} date: {value!r}", reason="invalid_date")

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def parse_limit(value: Any, default: int) -> int:
    """
    Parse the best-clients limit.

    Non-negative numbers are accepted and truncated to an integer.

    Raises:
        BadRequest: If the value is not a number or is negative
    """
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        raise BadRequest("Limit must be a non-negative number", reason="invalid_limit")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise BadRequest("Limit must be a non-negative number", reason="invalid_limit")
    if not math.isfinite(number) or number < 0:
        raise BadRequest("Limit must be a non-negative number", reason="invalid_limit")
    return int(number)


class ReportingEngine:
    """Best-profession and best-clients statistics."""

    def __init__(self, default_limit: Optional[int] = None) -> None:
        settings = get_settings()
        self.default_limit = (
            default_limit if default_limit is not None else settings.best_clients_default_limit
        )

    async def best_profession(
        self,
        db: AsyncSession,
        start: Optional[str] = None,
        end: Optional[str] = None,
    ) -> List[str]:
        """
        Highest earning profession(s) in the window.

        Every profession tied at the maximum total is returned. An empty
        list means no job was paid in the window.

        Raises:
            BadRequest: If either date cannot be parsed
        """
        start_date = parse_date(start, "start")
        end_date = parse_date(end, "end")
        start_time = time.time()

        contract_totals = await JobRepository(db).paid_totals_by_contract(start_date, end_date)
        if not contract_totals:
            return []

        contracts = await ContractRepository(db).list_by_ids(contract_totals)
        contractor_totals: Dict[int, Decimal] = defaultdict(Decimal)
        for contract in contracts:
            contractor_totals[contract.contractor_id] += contract_totals[contract.id]

        contractors = await ProfileRepository(db).list_by_ids(contractor_totals)
        profession_totals: Dict[str, Decimal] = defaultdict(Decimal)
        for contractor in sorted(contractors, key=lambda p: p.id):
            profession_totals[contractor.profession] += contractor_totals[contractor.id]

        if not profession_totals:
            return []

        best_total = max(profession_totals.values())
        professions = [
            profession
            for profession, total in profession_totals.items()
            if total == best_total
        ]

        duration = time.time() - start_time
        metrics.record_report("best_profession", duration)
        logger.info(
            "best_profession_computed",
            start=start_date.isoformat() if start_date else None,
            end=end_date.isoformat() if end_date else None,
            professions=professions,
            total=str(best_total),
        )
        return professions

    async def best_clients(
        self,
        db: AsyncSession,
        start: Optional[str] = None,
        end: Optional[str] = None,
        limit: Any = None,
    ) -> List[Dict[str, Any]]:
        """
        Clients who paid the most in the window, highest first.

        Args:
            db: Database session
            start: Optional lower payment-date bound (inclusive)
            end: Optional upper payment-date bound (inclusive)
            limit: Maximum number of clients; defaults to the configured
                limit. Zero returns an empty list without touching the store.

        Returns:
            List[Dict[str, Any]]: ``{"id", "fullName", "paid"}`` entries

        Raises:
            BadRequest: If a date or the limit is malformed
        """
        start_date = parse_date(start, "start")
        end_date = parse_date(end, "end")
        fetch_limit = parse_limit(limit, self.default_limit)

        if fetch_limit == 0:
            return []

        start_time = time.time()

        contract_totals = await JobRepository(db).paid_totals_by_contract(start_date, end_date)
        if not contract_totals:
            return []

        contracts = await ContractRepository(db).list_by_ids(contract_totals)
        client_totals: Dict[int, Decimal] = defaultdict(Decimal)
        for contract in contracts:
            client_totals[contract.client_id] += contract_totals[contract.id]

        # sorted() is stable: ties keep first-seen contract order
        ranked_ids = sorted(client_totals, key=lambda cid: client_totals[cid], reverse=True)
        top_ids = ranked_ids[:fetch_limit]

        clients = await ProfileRepository(db).list_by_ids(top_ids)
        by_id = {client.id: client for client in clients}

        result = [
            {
                "id": client_id,
                "fullName": by_id[client_id].full_name,
                "paid": client_totals[client_id],
            }
            for client_id in top_ids
            if client_id in by_id
        ]

        duration = time.time() - start_time
        metrics.record_report("best_clients", duration)
        logger.info(
            "best_clients_computed",
            start=start_date.isoformat() if start_date else None,
            end=end_date.isoformat() if end_date else None,
            limit=fetch_limit,
            returned=len(result),
        )
        return result
