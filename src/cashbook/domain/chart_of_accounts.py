"""Chart of accounts domain service."""

import logging
from typing import TYPE_CHECKING, Optional

from cashbook.domain.classification import storage_fields
from cashbook.domain.entities import ChartAccount, ChartAccountType, ChartTreeNode
from cashbook.domain.errors import (
    DependencyError,
    NotFoundError,
    ValidationError,
    chart_account_delete_blocked,
    chart_account_not_found,
)
from cashbook.domain.validation import parse_choice, require_text

if TYPE_CHECKING:
    from cashbook.database.base import Database

logger = logging.getLogger(__name__)

MAX_HIERARCHY_DEPTH = 32


class ChartOfAccountsService:
    """Service for managing the chart of accounts hierarchy."""

    def __init__(self, db: "Database"):
        """Initialize chart of accounts service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_chart_account(
        self,
        company_id: int,
        code: str,
        name: str,
        type: Optional[ChartAccountType | str] = None,
        parent_id: Optional[int] = None,
        description: Optional[str] = None,
    ) -> int:
        """Create a chart account.

        Args:
            company_id: Owning company
            code: Account code (e.g., "3.1.02")
            name: Account name
            type: Exposed type; inherited from the parent when omitted
            parent_id: Optional parent chart account
            description: Free text

        Returns:
            Chart account ID

        Raises:
            ValidationError: If a field is invalid, the parent is missing or
                the type does not match the parent's type
        """
        code = require_text(code, "code")
        name = require_text(name, "name")

        parent = None
        if parent_id is not None:
            parent = self.db.get_chart_account(company_id, parent_id)
            if parent is None:
                raise ValidationError(f"Parent {chart_account_not_found(parent_id)}")

        account_type = self._resolve_type(type, parent)
        stored_type, stored_description = storage_fields(account_type, description)

        chart_account_id = self.db.create_chart_account(
            company_id=company_id,
            code=code,
            name=name,
            stored_type=stored_type,
            parent_id=parent_id,
            description=stored_description,
        )
        logger.info("Created chart account %s (%s)", chart_account_id, account_type.value)
        return chart_account_id

    def get_chart_account(self, company_id: int, chart_account_id: int) -> Optional[ChartAccount]:
        """Get chart account by ID, with its derived type."""
        return self.db.get_chart_account(company_id, chart_account_id)

    def require_chart_account(self, company_id: int, chart_account_id: int) -> ChartAccount:
        """Get chart account by ID or raise NotFoundError."""
        chart = self.db.get_chart_account(company_id, chart_account_id)
        if chart is None:
            raise NotFoundError(chart_account_not_found(chart_account_id))
        return chart

    def list_chart_accounts(
        self, company_id: int, type: Optional[ChartAccountType | str] = None
    ) -> list[ChartAccount]:
        """List chart accounts ordered by code, optionally by exposed type."""
        charts = self.db.list_chart_accounts(company_id)
        if type is None:
            return charts
        wanted = parse_choice(ChartAccountType, type, "chart account type")
        return [chart for chart in charts if chart.type == wanted]

    def update_chart_account(
        self,
        company_id: int,
        chart_account_id: int,
        code: Optional[str] = None,
        name: Optional[str] = None,
        type: Optional[ChartAccountType | str] = None,
        parent_id: Optional[int] = None,
        description: Optional[str] = None,
        clear_parent: bool = False,
    ) -> None:
        """Update chart account fields.

        Only provided fields change. Keeping the cost type keeps exactly one
        marker in the description; switching away from cost removes it.

        Raises:
            NotFoundError: If the chart account does not exist
            ValidationError: If the new parent is missing, creates a cycle or
                has a different type
        """
        current = self.require_chart_account(company_id, chart_account_id)

        if clear_parent and parent_id is not None:
            raise ValidationError("Cannot set both parent_id and clear_parent")

        new_type = (
            parse_choice(ChartAccountType, type, "chart account type")
            if type is not None
            else current.type
        )

        if clear_parent:
            new_parent_id = None
        elif parent_id is not None:
            new_parent_id = parent_id
        else:
            new_parent_id = current.parent_id

        parent = None
        if new_parent_id is not None:
            parent = self.db.get_chart_account(company_id, new_parent_id)
            if parent is None:
                if new_parent_id != current.parent_id:
                    raise ValidationError(f"Parent {chart_account_not_found(new_parent_id)}")
                # Pre-existing dangling pointer: the parent was deleted
                new_parent_id = None
            else:
                self._check_no_cycle(company_id, chart_account_id, parent)

        parent_changed = new_parent_id != current.parent_id
        if parent is not None and (parent_changed or new_type != current.type):
            if parent.type != new_type:
                raise ValidationError(
                    f"Type '{new_type.value}' does not match parent type '{parent.type.value}'"
                )

        stored_type, stored_description = storage_fields(
            new_type, description if description is not None else current.description
        )
        self.db.update_chart_account(
            company_id=company_id,
            chart_account_id=chart_account_id,
            code=require_text(code, "code") if code is not None else current.code,
            name=require_text(name, "name") if name is not None else current.name,
            stored_type=stored_type,
            parent_id=new_parent_id,
            description=stored_description,
        )
        logger.info("Updated chart account %s (%s)", chart_account_id, new_type.value)

    def delete_chart_account(self, company_id: int, chart_account_id: int) -> None:
        """Delete a chart account.

        Children are kept with their parent_id pointing at the deleted row;
        readers such as get_chart_tree treat that as no parent.

        Raises:
            NotFoundError: If the chart account does not exist
            DependencyError: If any transaction references it
        """
        self.require_chart_account(company_id, chart_account_id)

        transaction_count = self.db.get_chart_account_transaction_count(
            company_id, chart_account_id
        )
        if transaction_count > 0:
            raise DependencyError(chart_account_delete_blocked(chart_account_id, transaction_count))

        self.db.delete_chart_account(company_id, chart_account_id)
        logger.info("Deleted chart account %s", chart_account_id)

    def get_chart_tree(self, company_id: int) -> list[ChartTreeNode]:
        """Build the hierarchy from the flat table.

        Nodes whose parent no longer exists are treated as roots.
        """
        charts = self.db.list_chart_accounts(company_id)
        index = {chart.id: chart for chart in charts}
        children_map: dict[Optional[int], list[ChartAccount]] = {}
        for chart in charts:
            parent_key = chart.parent_id if chart.parent_id in index else None
            children_map.setdefault(parent_key, []).append(chart)

        def build(parent_key: Optional[int], visited: frozenset[int]) -> tuple[ChartTreeNode, ...]:
            nodes = []
            for chart in children_map.get(parent_key, []):
                if chart.id in visited:
                    continue
                nodes.append(
                    ChartTreeNode(
                        id=chart.id,
                        code=chart.code,
                        name=chart.name,
                        type=chart.type,
                        parent_id=chart.parent_id if chart.parent_id in index else None,
                        children=build(chart.id, visited | {chart.id}),
                    )
                )
            return tuple(nodes)

        return list(build(None, frozenset()))

    def _resolve_type(
        self, type: Optional[ChartAccountType | str], parent: Optional[ChartAccount]
    ) -> ChartAccountType:
        if type is None:
            if parent is None:
                raise ValidationError("Type is required for a top-level chart account")
            return parent.type
        account_type = parse_choice(ChartAccountType, type, "chart account type")
        if parent is not None and parent.type != account_type:
            raise ValidationError(
                f"Type '{account_type.value}' does not match parent type '{parent.type.value}'"
            )
        return account_type

    def _check_no_cycle(self, company_id: int, chart_account_id: int, parent: ChartAccount) -> None:
        """Walk up from the proposed parent; reaching the account itself is a cycle."""
        node: Optional[ChartAccount] = parent
        depth = 0
        while node is not None:
            if node.id == chart_account_id:
                raise ValidationError(
                    f"Chart account {chart_account_id} cannot be its own ancestor"
                )
            depth += 1
            if depth > MAX_HIERARCHY_DEPTH:
                raise ValidationError(
                    f"Chart hierarchy deeper than {MAX_HIERARCHY_DEPTH} levels"
                )
            if node.parent_id is None:
                break
            node = self.db.get_chart_account(company_id, node.parent_id)
