"""Cost center domain service."""

import logging
from typing import TYPE_CHECKING, Optional

from cashbook.domain.entities import CostCenter, CostCenterUsage
from cashbook.domain.errors import (
    DependencyError,
    NotFoundError,
    cost_center_delete_blocked,
    cost_center_not_found,
)
from cashbook.domain.validation import require_text

if TYPE_CHECKING:
    from cashbook.database.base import Database

logger = logging.getLogger(__name__)


class CostCenterService:
    """Service for managing cost centers."""

    def __init__(self, db: "Database"):
        self.db = db

    def create_cost_center(
        self, company_id: int, code: str, name: str, description: Optional[str] = None
    ) -> int:
        """Create a cost center. Returns cost center ID."""
        cost_center_id = self.db.create_cost_center(
            company_id=company_id,
            code=require_text(code, "code"),
            name=require_text(name, "name"),
            description=description,
        )
        logger.info("Created cost center %s", cost_center_id)
        return cost_center_id

    def get_cost_center(self, company_id: int, cost_center_id: int) -> Optional[CostCenter]:
        return self.db.get_cost_center(company_id, cost_center_id)

    def list_cost_centers(self, company_id: int) -> list[CostCenter]:
        return self.db.list_cost_centers(company_id)

    def update_cost_center(
        self,
        company_id: int,
        cost_center_id: int,
        code: Optional[str] = None,
        name: Optional[str] = None,
        description: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> None:
        """Update the provided cost center fields.

        Raises:
            NotFoundError: If the cost center does not exist
        """
        current = self.db.get_cost_center(company_id, cost_center_id)
        if current is None:
            raise NotFoundError(cost_center_not_found(cost_center_id))

        self.db.update_cost_center(
            company_id=company_id,
            cost_center_id=cost_center_id,
            code=require_text(code, "code") if code is not None else current.code,
            name=require_text(name, "name") if name is not None else current.name,
            description=description if description is not None else current.description,
            is_active=is_active if is_active is not None else current.is_active,
        )
        logger.info("Updated cost center %s", cost_center_id)

    def delete_cost_center(self, company_id: int, cost_center_id: int) -> None:
        """Delete a cost center that no transaction references.

        Raises:
            NotFoundError: If the cost center does not exist
            DependencyError: If transactions still reference it
        """
        if self.db.get_cost_center(company_id, cost_center_id) is None:
            raise NotFoundError(cost_center_not_found(cost_center_id))

        transaction_count = self.db.get_cost_center_transaction_count(company_id, cost_center_id)
        if transaction_count > 0:
            raise DependencyError(cost_center_delete_blocked(cost_center_id, transaction_count))

        self.db.delete_cost_center(company_id, cost_center_id)
        logger.info("Deleted cost center %s", cost_center_id)

    def get_usage(self, company_id: int) -> dict[int, CostCenterUsage]:
        """Transaction count and expense total keyed by cost center ID."""
        return {usage.cost_center_id: usage for usage in self.db.get_cost_center_usage(company_id)}
