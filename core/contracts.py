"""Read-side queries over contracts and their jobs."""
from typing import List

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import NotFound
from database.models import Contract, Job, Profile
from database.repositories import ContractRepository, JobRepository

logger = structlog.get_logger(__name__)


class ContractService:
    """
    Contract and unpaid-job lookups scoped to the requesting profile.

    None of these take locks.
    """

    async def get_contract(
        self, contract_id: int, requester: Profile, db: AsyncSession
    ) -> Contract:
        """
        Fetch a contract the requester is a party to.

        Args:
            contract_id: Contract ID
            requester: Authenticated profile
            db: Database session

        Returns:
            Contract: The matching contract

        Raises:
            NotFound: If the contract does not exist or the requester is
                neither its client nor its contractor
        """
        contract = await ContractRepository(db).get_for_party(contract_id, requester.id)
        if contract is None:
            logger.info(
                "contract_not_found",
                contract_id=contract_id,
                profile_id=requester.id,
            )
            raise NotFound(f"Contract {contract_id} not found", reason="contract_not_found")
        return contract

    async def list_active_contracts(self, requester: Profile, db: AsyncSession) -> List[Contract]:
        """Every non-terminated contract where the requester is client or contractor."""
        return await ContractRepository(db).list_active_for_profile(requester.id)

    async def list_unpaid_jobs(self, requester: Profile, db: AsyncSession) -> List[Job]:
        """
        Unpaid jobs under the requester's active contracts.

        Jobs under terminated contracts are never returned, paid or not.
        """
        contract_ids = await ContractRepository(db).active_ids_for_profile(requester.id)
        if not contract_ids:
            return []
        return await JobRepository(db).list_unpaid_for_contracts(contract_ids)
