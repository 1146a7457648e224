"""
Seed the database with a demonstration dataset.

Drops and recreates every table, then loads:
- Clients, contractors and one admin
- Contracts in every status
- Paid jobs spread over a few days and outstanding unpaid jobs

Run with: python -m database.seed
"""
import argparse
import asyncio
from datetime import datetime, timezone
from decimal import Decimal

from config import get_settings
from database.connection import build_engine, build_session_factory, reset_db
from database.models import Contract, ContractStatus, Job, Profile, ProfileType
from monitoring.logging import get_logger, setup_logging

logger = get_logger(__name__)


def _profile(pid: int, first: str, last: str, profession: str, balance: str, kind: ProfileType) -> Profile:
    return Profile(
        id=pid,
        first_name=first,
        last_name=last,
        profession=profession,
        balance=Decimal(balance),
        type=kind.value,
    )


def _paid_on(day: int, hour: int = 12) -> datetime:
    return datetime(2020, 8, day, hour, tzinfo=timezone.utc)


def build_dataset() -> list:
    """Return every row to insert, parents before children."""
    profiles = [
        _profile(1, "Harriet", "Vance", "Architect", "1150", ProfileType.CLIENT),
        _profile(2, "Omar", "Reyes", "Analyst", "231.11", ProfileType.CLIENT),
        _profile(3, "Ines", "Kowalski", "Curator", "451.3", ProfileType.CLIENT),
        _profile(4, "Theo", "Lindqvist", "Pilot", "1.3", ProfileType.CLIENT),
        _profile(5, "Ada", "Okafor", "Programmer", "64", ProfileType.CONTRACTOR),
        _profile(6, "Bruno", "Santos", "Musician", "1214", ProfileType.CONTRACTOR),
        _profile(7, "Chen", "Wei", "Programmer", "22", ProfileType.CONTRACTOR),
        _profile(8, "Dana", "Moreau", "Designer", "314", ProfileType.CONTRACTOR),
        _profile(9, "Root", "Admin", "Administrator", "0", ProfileType.ADMIN),
    ]

    contracts = [
        Contract(id=1, terms="Landing page redesign", status=ContractStatus.TERMINATED.value, client_id=1, contractor_id=5),
        Contract(id=2, terms="Data pipeline build", status=ContractStatus.IN_PROGRESS.value, client_id=1, contractor_id=6),
        Contract(id=3, terms="Event soundtrack", status=ContractStatus.IN_PROGRESS.value, client_id=2, contractor_id=6),
        Contract(id=4, terms="Mobile app maintenance", status=ContractStatus.IN_PROGRESS.value, client_id=2, contractor_id=7),
        Contract(id=5, terms="Brand identity", status=ContractStatus.NEW.value, client_id=3, contractor_id=8),
        Contract(id=6, terms="Exhibit catalogue", status=ContractStatus.IN_PROGRESS.value, client_id=3, contractor_id=7),
        Contract(id=7, terms="Flight log tooling", status=ContractStatus.IN_PROGRESS.value, client_id=4, contractor_id=7),
        Contract(id=8, terms="Cockpit checklist app", status=ContractStatus.IN_PROGRESS.value, client_id=4, contractor_id=6),
        Contract(id=9, terms="Gallery audio guide", status=ContractStatus.IN_PROGRESS.value, client_id=4, contractor_id=8),
    ]

    jobs = [
        Job(id=1, description="Wireframes", price=Decimal("200"), contract_id=1),
        Job(id=2, description="ETL design", price=Decimal("201"), contract_id=2),
        Job(id=3, description="Theme composition", price=Decimal("202"), contract_id=3),
        Job(id=4, description="Crash fixes", price=Decimal("200"), contract_id=4),
        Job(id=5, description="Logo concepts", price=Decimal("200"), contract_id=7),
        Job(id=6, description="Mixing", price=Decimal("2020"), paid=True, payment_date=_paid_on(15), contract_id=7),
        Job(id=7, description="Release build", price=Decimal("200"), paid=True, payment_date=_paid_on(15), contract_id=2),
        Job(id=8, description="Schema migration", price=Decimal("200"), paid=True, payment_date=_paid_on(15), contract_id=3),
        Job(id=9, description="Palette study", price=Decimal("200"), paid=True, payment_date=_paid_on(17), contract_id=5),
        Job(id=10, description="Layout", price=Decimal("200"), paid=True, payment_date=_paid_on(17), contract_id=6),
        Job(id=11, description="Printing proofs", price=Decimal("21"), paid=True, payment_date=_paid_on(10), contract_id=1),
        Job(id=12, description="Copy edits", price=Decimal("21"), paid=True, payment_date=_paid_on(15), contract_id=2),
        Job(id=13, description="Voice-over", price=Decimal("121"), paid=True, payment_date=_paid_on(15), contract_id=3),
        Job(id=14, description="Final mix", price=Decimal("121"), paid=True, payment_date=_paid_on(14, 23), contract_id=3),
    ]

    return [*profiles, *contracts, *jobs]


async def seed(database_url: str) -> None:
    """Recreate the schema at ``database_url`` and load the dataset."""
    engine = build_engine(database_url)
    try:
        await reset_db(engine)
        session_factory = build_session_factory(engine)
        rows = build_dataset()
        async with session_factory() as session:
            session.add_all(rows)
            await session.commit()
        logger.info("database_seeded", rows=len(rows))
    finally:
        await engine.dispose()


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the contract payments database")
    parser.add_argument(
        "--database-url",
        default=None,
        help="Async SQLAlchemy URL (defaults to DATABASE_URL / settings)",
    )
    args = parser.parse_args()

    setup_logging()
    asyncio.run(seed(args.database_url or get_settings().database_url))


if __name__ == "__main__":
    main()
