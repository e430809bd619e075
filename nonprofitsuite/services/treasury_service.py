"""
Treasury: chart of accounts, ledger transactions and financial statements.
"""
import logging
from datetime import date
from typing import Any, Dict, List, Optional

from nonprofitsuite.api.permissions import can_manage_finances
from nonprofitsuite.db import schemas
from nonprofitsuite.db.repositories import treasury as treasury_repo
from nonprofitsuite.errors import ServiceError
from nonprofitsuite.services.base import BaseService
from nonprofitsuite.utils import cache
from nonprofitsuite.utils.pagination import parse_pagination_args
from nonprofitsuite.utils.sanitize import absint, parse_date, sanitize_text_field, sanitize_textarea_field, to_float

logger = logging.getLogger(__name__)

ACCOUNT_TYPES = {
    "asset": "Asset",
    "liability": "Liability",
    "equity": "Equity/Net Assets",
    "revenue": "Revenue",
    "expense": "Expense",
}
TRANSACTION_TYPES = ("debit", "credit")
STATEMENT_TTL = 3600

DEFAULT_CHART_OF_ACCOUNTS = [
    ("1000", "Cash - Operating", "asset"),
    ("1100", "Cash - Savings", "asset"),
    ("1200", "Accounts Receivable", "asset"),
    ("1500", "Property & Equipment", "asset"),
    ("2000", "Accounts Payable", "liability"),
    ("2100", "Accrued Expenses", "liability"),
    ("2500", "Long-term Debt", "liability"),
    ("3000", "Unrestricted Net Assets", "equity"),
    ("3100", "Temporarily Restricted Net Assets", "equity"),
    ("3200", "Permanently Restricted Net Assets", "equity"),
    ("4000", "Donations - Individual", "revenue"),
    ("4100", "Donations - Corporate", "revenue"),
    ("4200", "Grant Revenue", "revenue"),
    ("4300", "Program Service Revenue", "revenue"),
    ("4400", "Special Events Revenue", "revenue"),
    ("4500", "Investment Income", "revenue"),
    ("4900", "Other Revenue", "revenue"),
    ("5000", "Program Salaries", "expense"),
    ("5100", "Program Supplies", "expense"),
    ("5200", "Program Services", "expense"),
    ("6000", "Administrative Salaries", "expense"),
    ("6100", "Office Rent", "expense"),
    ("6200", "Office Supplies", "expense"),
    ("6300", "Professional Fees", "expense"),
    ("6400", "Insurance", "expense"),
    ("6500", "Utilities", "expense"),
    ("7000", "Fundraising Salaries", "expense"),
    ("7100", "Fundraising Events", "expense"),
    ("7200", "Donor Recognition", "expense"),
]


class TreasuryService(BaseService):
    module = "treasury"

    @staticmethod
    def get_account_types() -> Dict[str, str]:
        return dict(ACCOUNT_TYPES)

    def initialize_chart_of_accounts(self) -> int:
        """Seed the default chart; existing account numbers are left untouched."""
        can_manage_finances(self.current_user)
        created = 0
        with self.unit_of_work("initialize chart of accounts"):
            for number, name, account_type in DEFAULT_CHART_OF_ACCOUNTS:
                if treasury_repo.get_account_by_number(self.db, number):
                    continue
                treasury_repo.create_account(self.db, {
                    "account_number": number,
                    "account_name": name,
                    "account_type": account_type,
                    "is_active": True,
                })
                created += 1
        return created

    def create_account(self, data: Dict[str, Any]) -> schemas.AccountResponse:
        can_manage_finances(self.current_user)
        self.require_pro("Treasury")

        number = sanitize_text_field(data.get("account_number"))
        name = sanitize_text_field(data.get("account_name"))
        account_type = sanitize_text_field(data.get("account_type"))
        if not number or not name or not account_type:
            raise ServiceError("missing_required_field", "Account number, name, and type are required.")
        if account_type not in ACCOUNT_TYPES:
            raise ServiceError("invalid_account_type", "Invalid account type.")
        if treasury_repo.get_account_by_number(self.db, number):
            raise ServiceError("duplicate", f"Account number {number} already exists.")
        parent_id = absint(data.get("parent_account_id")) or None
        if parent_id and treasury_repo.get_account(self.db, parent_id) is None:
            raise ServiceError("invalid_parent_account", "Parent account not found.")

        with self.unit_of_work("create account"):
            account = treasury_repo.create_account(self.db, {
                "account_number": number,
                "account_name": name,
                "account_type": account_type,
                "parent_account_id": parent_id,
                "description": sanitize_textarea_field(data.get("description")) or None,
                "is_active": True,
            })
        return schemas.AccountResponse.model_validate(account)

    def get_accounts(self, account_type: Optional[str] = None) -> List[schemas.AccountResponse]:
        def _load():
            rows = treasury_repo.list_accounts(self.db, account_type=account_type)
            return [schemas.AccountResponse.model_validate(r) for r in rows]

        return self.remember(cache.list_key("treasury_accounts", {"type": account_type}), _load)

    def record_transaction(self, data: Dict[str, Any]) -> schemas.TransactionResponse:
        """Insert a ledger line and refresh the account balance in one transaction."""
        can_manage_finances(self.current_user)
        self.require_pro("Treasury")

        if not data.get("transaction_date"):
            raise ServiceError("missing_required_field", "Transaction date is required.")
        txn_date = parse_date(data.get("transaction_date"))
        if txn_date is None:
            raise ServiceError("invalid_date", "Invalid transaction date.")
        txn_type = sanitize_text_field(data.get("transaction_type"))
        if txn_type not in TRANSACTION_TYPES:
            raise ServiceError("invalid_transaction_type", "Transaction type must be debit or credit.")
        account_id = absint(data.get("account_id"))
        if not account_id or treasury_repo.get_account(self.db, account_id) is None:
            raise ServiceError("invalid_account_id", "Invalid account.")
        amount = to_float(data.get("amount"))
        if amount <= 0:
            raise ServiceError("invalid_amount", "Amount must be greater than zero.")
        description = sanitize_textarea_field(data.get("description"))
        if not description:
            raise ServiceError("missing_required_field", "Description is required.")

        with self.unit_of_work("record transaction"):
            txn = treasury_repo.insert_transaction(self.db, {
                "account_id": account_id,
                "transaction_date": txn_date,
                "transaction_type": txn_type,
                "amount": amount,
                "description": description,
                "reference_number": sanitize_text_field(data.get("reference_number")) or None,
                "category": sanitize_text_field(data.get("category")) or None,
                "created_by": self.user_id,
            })
            treasury_repo.recompute_account_balance(self.db, account_id)
        logger.info("transaction_recorded: account_id=%s type=%s amount=%.2f", account_id, txn_type, amount)
        return schemas.TransactionResponse.model_validate(txn)

    def get_transactions(
        self,
        account_id: Optional[int] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        args: Optional[Dict[str, Any]] = None,
    ) -> schemas.Page:
        parsed = parse_pagination_args(args, ("transaction_date",), default_orderby="transaction_date")
        rows, total = treasury_repo.list_transactions(
            self.db,
            args=parsed,
            account_id=account_id,
            start_date=parse_date(start_date),
            end_date=parse_date(end_date),
        )
        return self.to_page(rows, total, parsed, schemas.TransactionResponse)

    def _lines(self, account_type: str, end: date, start: Optional[date] = None) -> List[schemas.StatementLine]:
        rows = treasury_repo.balances_by_type(self.db, account_type=account_type, end_date=end, start_date=start)
        return [
            schemas.StatementLine(account_id=r[0], account_number=r[1], account_name=r[2], balance=float(r[3] or 0.0))
            for r in rows
        ]

    def generate_balance_sheet(self, as_of_date: Optional[str] = None) -> schemas.BalanceSheet:
        self.require_pro("Treasury")
        as_of = parse_date(as_of_date) or date.today()

        def _build():
            assets = self._lines("asset", as_of)
            liabilities = self._lines("liability", as_of)
            equity = self._lines("equity", as_of)
            sheet = schemas.BalanceSheet(
                as_of_date=as_of,
                assets=assets,
                liabilities=liabilities,
                equity=equity,
                total_assets=sum(a.balance for a in assets),
                total_liabilities=sum(a.balance for a in liabilities),
                total_equity=sum(a.balance for a in equity),
            )
            return sheet.model_dump(mode="json")

        key = f"ns_treasury_balance_sheet_{as_of.isoformat()}"
        payload = self.remember(key, _build, ttl=STATEMENT_TTL, store=cache.STORE_TRANSIENT)
        return schemas.BalanceSheet.model_validate(payload)

    def generate_income_statement(self, start_date: str, end_date: str) -> schemas.IncomeStatement:
        self.require_pro("Treasury")
        start = parse_date(start_date)
        end = parse_date(end_date)
        if start is None or end is None or start > end:
            raise ServiceError("invalid_date", "A valid start and end date are required.")

        def _build():
            revenue = self._lines("revenue", end, start)
            expenses = self._lines("expense", end, start)
            total_revenue = sum(a.balance for a in revenue)
            total_expenses = sum(a.balance for a in expenses)
            return schemas.IncomeStatement(
                start_date=start,
                end_date=end,
                revenue=revenue,
                expenses=expenses,
                total_revenue=total_revenue,
                total_expenses=total_expenses,
                net_income=total_revenue - total_expenses,
            ).model_dump(mode="json")

        key = f"ns_treasury_income_stmt_{start.isoformat()}_{end.isoformat()}"
        payload = self.remember(key, _build, ttl=STATEMENT_TTL, store=cache.STORE_TRANSIENT)
        return schemas.IncomeStatement.model_validate(payload)
