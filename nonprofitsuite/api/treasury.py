"""
Treasury API endpoints: chart of accounts, ledger and financial statements.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from nonprofitsuite.api.deps import get_current_user_context
from nonprofitsuite.db import schemas
from nonprofitsuite.db.database import get_db
from nonprofitsuite.services.treasury_service import TreasuryService

router = APIRouter(prefix="/treasury", tags=["treasury"])


def _service(db: Session, user_context) -> TreasuryService:
    _user, ctx = user_context
    return TreasuryService(db, ctx)


@router.get("/account-types")
def account_types():
    return TreasuryService.get_account_types()


@router.post("/accounts/initialize")
def initialize_accounts(db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    return {"created": _service(db, user_context).initialize_chart_of_accounts()}


@router.get("/accounts", response_model=list[schemas.AccountResponse])
def list_accounts(
    account_type: Optional[str] = None,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    return _service(db, user_context).get_accounts(account_type)


@router.post("/accounts", response_model=schemas.AccountResponse, status_code=status.HTTP_201_CREATED)
def create_account(
    payload: schemas.AccountCreate,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    return _service(db, user_context).create_account(payload.model_dump(exclude_unset=True))


@router.post("/transactions", response_model=schemas.TransactionResponse, status_code=status.HTTP_201_CREATED)
def record_transaction(
    payload: schemas.TransactionCreate,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    return _service(db, user_context).record_transaction(payload.model_dump(exclude_unset=True))


@router.get("/transactions", response_model=schemas.Page)
def list_transactions(
    request: Request,
    account_id: Optional[int] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    return _service(db, user_context).get_transactions(
        account_id=account_id, start_date=start_date, end_date=end_date, args=dict(request.query_params)
    )


@router.get("/balance-sheet", response_model=schemas.BalanceSheet)
def balance_sheet(
    as_of_date: Optional[str] = None,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    return _service(db, user_context).generate_balance_sheet(as_of_date)


@router.get("/income-statement", response_model=schemas.IncomeStatement)
def income_statement(
    start_date: str,
    end_date: str,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    return _service(db, user_context).generate_income_statement(start_date, end_date)
