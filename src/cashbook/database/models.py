"""SQLAlchemy models for cashbook database.

Every table carries a ``company_id`` column; queries always filter on it.
"""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    Index,
    create_engine,
)
from sqlalchemy.orm import backref, declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


class Account(Base):
    """Cash account model."""

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, nullable=False, index=True)
    name = Column(String, nullable=False)
    kind = Column(String, nullable=False)
    initial_balance = Column(Numeric(14, 2), default=0, nullable=False)
    current_balance = Column(Numeric(14, 2), default=0, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    transactions = relationship("Transaction", back_populates="account")


class ChartAccount(Base):
    """Chart of accounts model.

    ``type`` holds one of five stored values; the cost subtype lives in the
    description marker (see cashbook.domain.classification).
    """

    __tablename__ = "chart_of_accounts"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, nullable=False, index=True)
    code = Column(String, nullable=False)
    name = Column(String, nullable=False)
    type = Column(String, nullable=False)
    parent_id = Column(Integer, ForeignKey("chart_of_accounts.id"), nullable=True)
    description = Column(String, default="", nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    # Deleting a parent leaves the children's parent_id dangling
    parent = relationship(
        "ChartAccount", remote_side=[id], backref=backref("children", passive_deletes="all")
    )
    transactions = relationship("Transaction", back_populates="chart_account")


class CostCenter(Base):
    """Cost center model."""

    __tablename__ = "cost_centers"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, nullable=False, index=True)
    code = Column(String, nullable=False)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    transactions = relationship("Transaction", back_populates="cost_center")


class Transaction(Base):
    """Transaction model."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, nullable=False)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    type = Column(String, nullable=False)
    date = Column(Date, nullable=False)
    value = Column(Numeric(14, 2), nullable=False)
    status = Column(String, nullable=False)
    chart_account_id = Column(Integer, ForeignKey("chart_of_accounts.id"), nullable=True)
    cost_center_id = Column(Integer, ForeignKey("cost_centers.id"), nullable=True)
    description = Column(String, nullable=True)
    payment_method = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (
        Index("ix_transactions_company_date", "company_id", "date"),
        Index("ix_transactions_account_status", "account_id", "status"),
    )

    # Relationships
    account = relationship("Account", back_populates="transactions")
    chart_account = relationship("ChartAccount", back_populates="transactions")
    cost_center = relationship("CostCenter", back_populates="transactions")


class BankReconciliation(Base):
    """Bank reconciliation header model."""

    __tablename__ = "bank_reconciliations"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, nullable=False, index=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    reconciliation_date = Column(Date, nullable=False)
    statement_balance = Column(Numeric(14, 2), nullable=False)
    book_balance = Column(Numeric(14, 2), nullable=False)
    difference = Column(Numeric(14, 2), nullable=False)
    status = Column(String, nullable=False)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    account = relationship("Account")
    items = relationship("ReconciliationItem", back_populates="reconciliation")


class ReconciliationItem(Base):
    """Reconciliation item model."""

    __tablename__ = "reconciliation_items"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, nullable=False)
    reconciliation_id = Column(
        Integer, ForeignKey("bank_reconciliations.id"), nullable=False, index=True
    )
    transaction_id = Column(Integer, ForeignKey("transactions.id"), nullable=True)
    date = Column(Date, nullable=True)
    description = Column(String, nullable=False)
    value = Column(Numeric(14, 2), nullable=False)
    origin = Column(String, nullable=False)
    is_reconciled = Column(Boolean, default=False, nullable=False)

    # Relationships
    reconciliation = relationship("BankReconciliation", back_populates="items")


class CashFlowProjection(Base):
    """Cash-flow projection model."""

    __tablename__ = "cash_flow_projections"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, nullable=False)
    date = Column(Date, nullable=False)
    description = Column(String, nullable=False)
    type = Column(String, nullable=False)
    projected_value = Column(Numeric(14, 2), nullable=False)
    actual_value = Column(Numeric(14, 2), nullable=True)
    chart_account_id = Column(Integer, ForeignKey("chart_of_accounts.id"), nullable=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=True)
    is_recurring = Column(Boolean, default=False, nullable=False)
    recurrence_pattern = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (Index("ix_projections_company_date", "company_id", "date"),)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
