"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested entity does not exist or belongs to another company."""


class ConflictError(DomainError):
    """Operation not allowed in the entity's current state."""


class DependencyError(ConflictError):
    """Operation blocked due to dependent domain data."""


class ParseError(DomainError):
    """Statement file is unsupported or could not be parsed at all."""


class IntegrityError(DomainError):
    """A record mutation and its balance adjustment could not be applied together."""


def account_not_found(account_id: int) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def transaction_not_found(transaction_id: int) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def chart_account_not_found(chart_account_id: int) -> str:
    """Return message for missing chart account."""
    return f"Chart account {chart_account_id} not found"


def cost_center_not_found(cost_center_id: int) -> str:
    """Return message for missing cost center."""
    return f"Cost center {cost_center_id} not found"


def reconciliation_not_found(reconciliation_id: int) -> str:
    """Return message for missing bank reconciliation."""
    return f"Reconciliation {reconciliation_id} not found"


def reconciliation_item_not_found(item_id: int) -> str:
    """Return message for missing reconciliation item."""
    return f"Reconciliation item {item_id} not found"


def projection_not_found(projection_id: int) -> str:
    """Return message for missing cash-flow projection."""
    return f"Projection {projection_id} not found"


def reconciliation_already_completed(reconciliation_id: int) -> str:
    """Return message when a reconciliation is already closed."""
    return f"Reconciliation {reconciliation_id} is already reconciled"


def transaction_changed_concurrently(transaction_id: int) -> str:
    """Return message when a transaction changed between read and write."""
    return f"Transaction {transaction_id} was changed by another session; nothing was applied"


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}{'s' if count != 1 else ''}"


def account_delete_blocked(
    account_id: int, transaction_count: int, reconciliation_count: int
) -> str:
    """Return message when account has dependent transactions or reconciliations."""
    parts = []
    if transaction_count > 0:
        parts.append(_plural(transaction_count, "transaction"))
    if reconciliation_count > 0:
        parts.append(_plural(reconciliation_count, "reconciliation"))
    return (
        f"Cannot delete account {account_id}: it has {', '.join(parts)}. "
        "Please reassign or delete them first."
    )


def chart_account_delete_blocked(chart_account_id: int, transaction_count: int) -> str:
    """Return message when a chart account is still referenced by transactions."""
    return (
        f"Cannot delete chart account {chart_account_id}: "
        f"it is used by {_plural(transaction_count, 'transaction')}."
    )


def cost_center_delete_blocked(cost_center_id: int, transaction_count: int) -> str:
    """Return message when a cost center is still referenced by transactions."""
    return (
        f"Cannot delete cost center {cost_center_id}: "
        f"it is used by {_plural(transaction_count, 'transaction')}."
    )
