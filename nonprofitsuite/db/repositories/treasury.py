"""
Repositories for the chart of accounts and ledger transactions.
"""
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import and_, case, func
from sqlalchemy.orm import Session

from nonprofitsuite.db import models
from nonprofitsuite.utils.pagination import PaginationArgs

# Accounts whose balance grows with credits
CREDIT_NORMAL_TYPES = frozenset({"liability", "equity", "revenue"})


def _signed_amount(account_type_col):
    """Debit-positive for asset/expense accounts, credit-positive for the rest."""
    debit = models.Transaction.transaction_type == "debit"
    credit = models.Transaction.transaction_type == "credit"
    credit_normal = account_type_col.in_(CREDIT_NORMAL_TYPES)
    return case(
        (and_(debit, ~credit_normal), models.Transaction.amount),
        (and_(credit, ~credit_normal), -models.Transaction.amount),
        (and_(credit, credit_normal), models.Transaction.amount),
        (and_(debit, credit_normal), -models.Transaction.amount),
        else_=0.0,
    )


def create_account(db: Session, values: Dict[str, Any]) -> models.Account:
    account = models.Account(**values)
    db.add(account)
    db.flush()
    return account


def get_account(db: Session, account_id: int) -> Optional[models.Account]:
    return db.get(models.Account, account_id)


def get_account_by_number(db: Session, account_number: str) -> Optional[models.Account]:
    return db.query(models.Account).filter(models.Account.account_number == account_number).first()


def list_accounts(db: Session, *, account_type: Optional[str] = None) -> List[models.Account]:
    q = db.query(models.Account).filter(models.Account.is_active.is_(True))
    if account_type:
        q = q.filter(models.Account.account_type == account_type)
    return q.order_by(models.Account.account_number.asc()).all()


def insert_transaction(db: Session, values: Dict[str, Any]) -> models.Transaction:
    txn = models.Transaction(**values)
    db.add(txn)
    db.flush()
    return txn


def recompute_account_balance(db: Session, account_id: int) -> models.Account:
    account = db.get(models.Account, account_id)
    total = (
        db.query(func.coalesce(func.sum(_signed_amount(models.Account.account_type)), 0.0))
        .select_from(models.Transaction)
        .join(models.Account, models.Account.id == models.Transaction.account_id)
        .filter(models.Transaction.account_id == account_id)
        .scalar()
    )
    account.balance = float(total or 0.0)
    db.flush()
    return account


def list_transactions(
    db: Session,
    *,
    args: PaginationArgs,
    account_id: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> Tuple[List[models.Transaction], int]:
    q = db.query(models.Transaction)
    if account_id:
        q = q.filter(models.Transaction.account_id == account_id)
    if start_date:
        q = q.filter(models.Transaction.transaction_date >= start_date)
    if end_date:
        q = q.filter(models.Transaction.transaction_date <= end_date)
    total = q.count()
    rows = (
        q.order_by(models.Transaction.transaction_date.desc(), models.Transaction.id.desc())
        .offset(args.offset)
        .limit(args.limit)
        .all()
    )
    return rows, total


def balances_by_type(
    db: Session, *, account_type: str, end_date: date, start_date: Optional[date] = None
) -> List[Tuple[int, str, str, float]]:
    """Per-account balances for one account type over an optional date window."""
    join_cond = [models.Transaction.account_id == models.Account.id, models.Transaction.transaction_date <= end_date]
    if start_date:
        join_cond.append(models.Transaction.transaction_date >= start_date)
    balance = func.coalesce(func.sum(_signed_amount(models.Account.account_type)), 0.0)
    return (
        db.query(models.Account.id, models.Account.account_number, models.Account.account_name, balance)
        .outerjoin(models.Transaction, and_(*join_cond))
        .filter(models.Account.account_type == account_type, models.Account.is_active.is_(True))
        .group_by(models.Account.id, models.Account.account_number, models.Account.account_name)
        .order_by(models.Account.account_number.asc())
        .all()
    )


def sum_by_type(
    db: Session, *, account_type: str, start_date: date, end_date: date, categories: Optional[List[str]] = None
) -> float:
    q = (
        db.query(func.coalesce(func.sum(_signed_amount(models.Account.account_type)), 0.0))
        .select_from(models.Transaction)
        .join(models.Account, models.Account.id == models.Transaction.account_id)
        .filter(
            models.Account.account_type == account_type,
            models.Transaction.transaction_date >= start_date,
            models.Transaction.transaction_date <= end_date,
        )
    )
    if categories:
        q = q.filter(models.Transaction.category.in_(categories))
    return float(q.scalar() or 0.0)
