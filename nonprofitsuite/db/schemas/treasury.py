from datetime import date
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class AccountCreate(BaseModel):
    account_number: Optional[str] = None
    account_name: Optional[str] = None
    account_type: Optional[str] = None
    parent_account_id: Optional[int] = None
    description: Optional[str] = None


class AccountResponse(BaseModel):
    id: int
    account_number: str
    account_name: str
    account_type: str
    parent_account_id: Optional[int] = None
    description: Optional[str] = None
    balance: float
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


class TransactionCreate(BaseModel):
    account_id: Optional[int] = None
    transaction_date: Optional[str] = None
    transaction_type: Optional[str] = None
    amount: Optional[float] = None
    description: Optional[str] = None
    reference_number: Optional[str] = None
    category: Optional[str] = None


class TransactionResponse(BaseModel):
    id: int
    account_id: int
    transaction_date: date
    transaction_type: str
    amount: float
    description: str
    reference_number: Optional[str] = None
    category: Optional[str] = None
    created_by: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class StatementLine(BaseModel):
    account_id: int
    account_number: str
    account_name: str
    balance: float


class BalanceSheet(BaseModel):
    as_of_date: date
    assets: List[StatementLine]
    liabilities: List[StatementLine]
    equity: List[StatementLine]
    total_assets: float
    total_liabilities: float
    total_equity: float


class IncomeStatement(BaseModel):
    start_date: date
    end_date: date
    revenue: List[StatementLine]
    expenses: List[StatementLine]
    total_revenue: float
    total_expenses: float
    net_income: float
