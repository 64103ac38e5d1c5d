"""
Tests for the financial reports.

Most tests share one quarter of trading on the default jewelry
chart (all dates in 2024):

  01-02  owner pays 10,000 into the main bank account (journal)
  01-10  invoice #1: gold jewelry sold on credit for 1,500,
         goods costing 600 leave stock; due 01-31
  01-20  supplier invoice #50: 3,000 of finished goods; due 02-19
  02-15  customer pays 500 against invoice #1
  02-20  equipment disposed of for 800 cash
  03-05  200 of advertising paid from the bank
  04-10  999 cash sale (after the quarter)
"""

from datetime import date
from decimal import Decimal

import pytest

from jewelry_ledger.exceptions import NotFoundError, ValidationError
from jewelry_ledger.models.enums import AccountType, SourceKind, TransactionType
from jewelry_ledger.schemas.account import AccountCreate, AccountUpdate
from jewelry_ledger.schemas.cost_center import CostCenterCreate
from jewelry_ledger.schemas.transaction import (
    AssetDisposalSource,
    InvoiceSource,
    TransactionDraft,
    TransactionEntryCreate,
)
from jewelry_ledger.services.account_service import AccountService
from jewelry_ledger.services.cost_center_service import CostCenterService
from jewelry_ledger.services.ledger_service import LedgerService
from jewelry_ledger.services.report_service import (
    MANUAL_TYPE_ACTIVITY,
    OPENING_BALANCE_EQUITY,
    SOURCE_ACTIVITY,
    ReportService,
    aging_bucket,
    classify_cash_activity,
)

Q1_START = date(2024, 1, 1)
Q1_END = date(2024, 3, 31)


def post(db, on, legs, **kwargs):
    return LedgerService(db).create_transaction(TransactionDraft(
        description=kwargs.pop("description", "Posting"),
        transaction_date=on,
        entries=[
            TransactionEntryCreate(
                account_id=account.id,
                debit_amount=Decimal(debit),
                credit_amount=Decimal(credit),
            )
            for account, debit, credit in legs
        ],
        **kwargs,
    ))


@pytest.fixture
def shop(db_session):
    accounts = AccountService(db_session)
    accounts.seed_default_chart()
    a = {code: accounts.get_account_by_code(code) for code in (
        "1110", "1120", "1210", "1350", "1511", "2110",
        "3100", "4110", "5110", "6110",
    )}
    store = CostCenterService(db_session).register(
        CostCenterCreate(code="STORE", name="Main store", name_local="فروشگاه")
    )

    post(db_session, date(2024, 1, 2), [
        (a["1120"], "10000", "0"), (a["3100"], "0", "10000"),
    ], description="Owner capital")
    post(db_session, date(2024, 1, 10), [
        (a["1210"], "1500", "0"), (a["4110"], "0", "1500"),
        (a["5110"], "600", "0"), (a["1350"], "0", "600"),
    ], description="Invoice 1",
        transaction_type=TransactionType.INVOICE,
        source=InvoiceSource(invoice_id=1, due_date=date(2024, 1, 31)),
        cost_center_id=store.id)
    post(db_session, date(2024, 1, 20), [
        (a["1350"], "3000", "0"), (a["2110"], "0", "3000"),
    ], description="Supplier invoice 50",
        transaction_type=TransactionType.INVOICE,
        source=InvoiceSource(invoice_id=50, due_date=date(2024, 2, 19)))
    post(db_session, date(2024, 2, 15), [
        (a["1120"], "500", "0"), (a["1210"], "0", "500"),
    ], description="Payment on invoice 1",
        transaction_type=TransactionType.PAYMENT,
        source=InvoiceSource(invoice_id=1))
    post(db_session, date(2024, 2, 20), [
        (a["1120"], "800", "0"), (a["1511"], "0", "800"),
    ], description="Sold old rolling mill",
        source=AssetDisposalSource(asset_id=5))
    post(db_session, date(2024, 3, 5), [
        (a["6110"], "200", "0"), (a["1120"], "0", "200"),
    ], description="Newspaper ads", transaction_type=TransactionType.PAYMENT)
    post(db_session, date(2024, 4, 10), [
        (a["1120"], "999", "0"), (a["4110"], "0", "999"),
    ], description="Walk-in sale")
    db_session.commit()

    a["store"] = store
    return a


# --- Trial Balance ---

class TestTrialBalance:

    def test_opening_balance_scenario(self, db_session):
        accounts = AccountService(db_session)
        cash = accounts.register_account(AccountCreate(
            code="1110", name="Cash", account_type=AccountType.ASSET,
            opening_balance=Decimal("1000"),
        ))
        sales = accounts.register_account(AccountCreate(
            code="4110", name="Sales Revenue", account_type=AccountType.REVENUE,
        ))
        post(db_session, date.today(), [(cash, "500", "0"), (sales, "0", "500")])
        db_session.commit()

        trial = ReportService(db_session).trial_balance()

        rows = {r.name: r for r in trial.rows}
        assert rows["Cash"].debit == Decimal("1500")
        assert rows["Sales Revenue"].credit == Decimal("500")
        assert rows[OPENING_BALANCE_EQUITY].credit == Decimal("1000")
        assert trial.total_debit == trial.total_credit == Decimal("1500")
        assert trial.balanced is True

    def test_quarter_is_balanced(self, db_session, shop):
        trial = ReportService(db_session).trial_balance(Q1_END)

        assert trial.balanced is True
        assert all(r.name != OPENING_BALANCE_EQUITY for r in trial.rows)

    def test_negative_balance_moves_column(self, db_session, shop):
        trial = ReportService(db_session).trial_balance(Q1_END)

        equipment = next(r for r in trial.rows if r.code == "1511")
        assert equipment.balance == Decimal("-800")
        assert equipment.debit == Decimal("0")
        assert equipment.credit == Decimal("800")

    def test_uses_own_balances_not_rollups(self, db_session, shop):
        trial = ReportService(db_session).trial_balance(Q1_END)

        parent = next(r for r in trial.rows if r.code == "1100")
        assert parent.balance == Decimal("0")

    def test_as_of_excludes_later_entries(self, db_session, shop):
        trial = ReportService(db_session).trial_balance(date(2024, 1, 5))

        bank = next(r for r in trial.rows if r.code == "1120")
        assert bank.debit == Decimal("10000")
        assert trial.total_debit == Decimal("10000")

    def test_inactive_accounts(self, db_session, shop):
        accounts = AccountService(db_session)
        accounts.update_account(shop["1350"].id, AccountUpdate(is_active=False))
        accounts.update_account(shop["1110"].id, AccountUpdate(is_active=False))

        codes = {r.code for r in ReportService(db_session).trial_balance(Q1_END).rows}

        assert "1350" in codes
        assert "1110" not in codes

    def test_local_names(self, db_session, shop):
        trial = ReportService(db_session, locale="fa").trial_balance(Q1_END)

        bank = next(r for r in trial.rows if r.code == "1120")
        assert bank.name == "حساب بانکی - اصلی"


# --- Balance Sheet ---

class TestBalanceSheet:

    def test_quarter_end(self, db_session, shop):
        sheet = ReportService(db_session).balance_sheet(Q1_END)

        assert sheet.total_assets == Decimal("13700")
        assert sheet.total_liabilities == Decimal("3000")
        assert sheet.total_equity == Decimal("10700")
        assert sheet.balanced is True
        assert [s.label for s in sheet.assets] == ["Fixed assets", "Current assets"]
        net_income = next(
            line for line in sheet.equity.lines
            if line.label == "Accumulated net income"
        )
        assert net_income.amount == Decimal("700")

    def test_balances_with_opening_balances(self, db_session):
        accounts = AccountService(db_session)
        accounts.register_account(AccountCreate(
            code="1110", name="Cash", account_type=AccountType.ASSET,
            subtype="cash", opening_balance=Decimal("2500"),
        ))
        accounts.register_account(AccountCreate(
            code="2510", name="Loan", account_type=AccountType.LIABILITY,
            subtype="long_term_liability", opening_balance=Decimal("1000"),
        ))
        db_session.commit()

        sheet = ReportService(db_session).balance_sheet()

        assert sheet.total_assets == Decimal("2500")
        assert [s.label for s in sheet.liabilities] == ["Long-term liabilities"]
        assert sheet.total_liabilities_and_equity == Decimal("2500")
        assert sheet.balanced is True


# --- Income Statement ---

class TestIncomeStatement:

    def test_period_movements_only(self, db_session, shop):
        statement = ReportService(db_session).income_statement(Q1_START, Q1_END)

        assert statement.total_revenue == Decimal("1500")
        assert statement.cost_of_goods_sold == Decimal("600")
        assert statement.total_expenses == Decimal("800")
        assert statement.gross_profit == Decimal("900")
        assert statement.net_profit == Decimal("700")
        # the April sale is in the cached balance but not in Q1
        assert shop["4110"].current_balance == Decimal("2499")

    def test_sections(self, db_session, shop):
        statement = ReportService(db_session).income_statement(Q1_START, Q1_END)

        assert [s.label for s in statement.revenue] == ["Operating revenue"]
        assert [s.label for s in statement.expenses] == [
            "Cost of goods sold", "Operating expenses",
        ]

    def test_cost_center_filter(self, db_session, shop):
        statement = ReportService(db_session).income_statement(
            Q1_START, Q1_END, cost_center_id=shop["store"].id
        )

        assert statement.total_revenue == Decimal("1500")
        assert statement.total_expenses == Decimal("600")
        assert statement.net_profit == Decimal("900")

    def test_inverted_range_rejected(self, db_session):
        with pytest.raises(ValidationError):
            ReportService(db_session).income_statement(Q1_END, Q1_START)


# --- Cash Flow ---

class TestCashFlow:

    def test_classification_covers_every_source(self):
        assert set(SOURCE_ACTIVITY) == set(SourceKind)
        assert set(MANUAL_TYPE_ACTIVITY) == set(TransactionType)
        for source in SourceKind:
            for transaction_type in TransactionType:
                assert classify_cash_activity(source, transaction_type) is not None

    def test_quarter(self, db_session, shop):
        report = ReportService(db_session).cash_flow_statement(Q1_START, Q1_END)

        totals = {s.label: s.total for s in report.activities}
        assert totals == {
            "operating": Decimal("300"),
            "investing": Decimal("800"),
            "financing": Decimal("10000"),
        }
        assert report.opening_cash == Decimal("0")
        assert report.net_change == Decimal("11100")
        assert report.closing_cash == Decimal("11100")
        assert report.reconciled is True

    def test_opening_plus_change_is_closing(self, db_session, shop):
        report = ReportService(db_session).cash_flow_statement(
            date(2024, 2, 1), date(2024, 4, 30)
        )

        assert report.opening_cash == Decimal("10000")
        assert report.opening_cash + report.net_change == report.closing_cash
        assert report.closing_cash == Decimal("12099")
        assert report.reconciled is True


# --- Aging ---

class TestAging:

    def test_buckets(self):
        assert aging_bucket(-5) == "current"
        assert aging_bucket(0) == "current"
        assert aging_bucket(1) == "1_30"
        assert aging_bucket(30) == "1_30"
        assert aging_bucket(31) == "31_60"
        assert aging_bucket(90) == "61_90"
        assert aging_bucket(91) == "over_90"

    def test_partly_paid_receivable(self, db_session, shop):
        report = ReportService(db_session).aged_receivables(Q1_END)

        assert len(report.items) == 1
        item = report.items[0]
        assert item.invoice_id == 1
        assert item.outstanding == Decimal("1000")
        assert item.due_date == date(2024, 1, 31)
        assert item.days_overdue == 60
        assert item.bucket == "31_60"
        assert report.total == Decimal("1000")
        buckets = {b.label: b for b in report.buckets}
        assert buckets["31_60"].count == 1
        assert buckets["current"].amount == Decimal("0")

    def test_receivable_before_payment(self, db_session, shop):
        report = ReportService(db_session).aged_receivables(date(2024, 2, 1))

        assert report.items[0].outstanding == Decimal("1500")
        assert report.items[0].bucket == "1_30"

    def test_not_yet_due_is_current(self, db_session, shop):
        report = ReportService(db_session).aged_receivables(date(2024, 1, 15))

        assert report.items[0].bucket == "current"
        assert report.items[0].days_overdue == 0

    def test_settled_invoice_drops_out(self, db_session, shop):
        post(db_session, date(2024, 3, 20), [
            (shop["1120"], "1000", "0"), (shop["1210"], "0", "1000"),
        ], transaction_type=TransactionType.PAYMENT,
            source=InvoiceSource(invoice_id=1))

        report = ReportService(db_session).aged_receivables(Q1_END)

        assert report.items == []
        assert report.total == Decimal("0")

    def test_payables(self, db_session, shop):
        report = ReportService(db_session).aged_payables(Q1_END)

        assert report.kind == "payables"
        assert [(i.invoice_id, i.outstanding, i.bucket) for i in report.items] == [
            (50, Decimal("3000"), "31_60"),
        ]


# --- General Ledger ---

class TestGeneralLedger:

    def test_running_balance(self, db_session, shop):
        ledger = ReportService(db_session).general_ledger(
            shop["1120"].id, date(2024, 2, 1), Q1_END
        )

        assert ledger.opening_balance == Decimal("10000")
        assert [line.balance for line in ledger.lines] == [
            Decimal("10500"), Decimal("11300"), Decimal("11100"),
        ]
        assert ledger.closing_balance == Decimal("11100")

    def test_unknown_account(self, db_session):
        with pytest.raises(NotFoundError):
            ReportService(db_session).general_ledger(999)


# --- Cost Centers ---

class TestCostCenterSummary:

    def test_per_center_and_unassigned(self, db_session, shop):
        summary = ReportService(db_session).cost_center_summary(Q1_START, Q1_END)

        rows = {r.code: r for r in summary.rows}
        assert rows["STORE"].revenue == Decimal("1500")
        assert rows["STORE"].expenses == Decimal("600")
        assert rows["STORE"].net == Decimal("900")
        assert rows[None].name == "Unassigned"
        assert rows[None].expenses == Decimal("200")

    def test_local_center_names(self, db_session, shop):
        summary = ReportService(db_session, locale="fa").cost_center_summary(
            Q1_START, Q1_END
        )
        assert summary.rows[0].name == "فروشگاه"
