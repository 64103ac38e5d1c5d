"""
Financial report service.

Read-only. Every report starts from the same two inputs, the
account tree and the entry rows it needs, and derives its
figures from entries rather than from cached balances, so a
report for any past date is as reliable as one for today.

Statements work on each account's own balance (its opening
balance and its own entries). Parents already include their
children in the cache; summing cached parents and children
together would count every child twice.
"""

import logging
from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from jewelry_ledger.config import Settings, get_settings
from jewelry_ledger.exceptions import NotFoundError, ValidationError
from jewelry_ledger.models.cost_center import CostCenter
from jewelry_ledger.models.enums import (
    AccountSubtype,
    AccountType,
    CashFlowActivity,
    SourceKind,
    TransactionType,
)
from jewelry_ledger.models.transaction import Transaction
from jewelry_ledger.models.transaction_entry import TransactionEntry
from jewelry_ledger.schemas.report import (
    AgingBucket,
    AgingItem,
    AgingReport,
    BalanceSheetReport,
    CashFlowReport,
    CostCenterSummaryReport,
    CostCenterSummaryRow,
    GeneralLedgerLine,
    GeneralLedgerReport,
    IncomeStatementReport,
    ReportLine,
    ReportSection,
    TrialBalanceReport,
    TrialBalanceRow,
)
from jewelry_ledger.services.account_tree import (
    ZERO,
    AccountNode,
    AccountTree,
    signed_amount,
)
from jewelry_ledger.services.balances import (
    load_tree,
    own_balances,
    signed_movements,
)

logger = logging.getLogger(__name__)

OPENING_BALANCE_EQUITY = "Opening balance equity"
NET_INCOME = "Accumulated net income"

# Statement sections, in display order: (subtype, label).
# Accounts whose subtype is not listed land in the last section.
ASSET_SECTIONS = [
    (AccountSubtype.FIXED_ASSET, "Fixed assets"),
    (None, "Current assets"),
]
LIABILITY_SECTIONS = [
    (AccountSubtype.LONG_TERM_LIABILITY, "Long-term liabilities"),
    (None, "Current liabilities"),
]
REVENUE_SECTIONS = [
    (AccountSubtype.OTHER_REVENUE, "Other revenue"),
    (None, "Operating revenue"),
]
EXPENSE_SECTIONS = [
    (AccountSubtype.COST_OF_GOODS_SOLD, "Cost of goods sold"),
    (AccountSubtype.OTHER_EXPENSE, "Other expenses"),
    (None, "Operating expenses"),
]

# Cash flow classification by where a transaction came from.
# None means "look at the transaction type instead".
SOURCE_ACTIVITY: dict[SourceKind, CashFlowActivity | None] = {
    SourceKind.INVOICE: CashFlowActivity.OPERATING,
    SourceKind.RECURRING_INVOICE: CashFlowActivity.OPERATING,
    SourceKind.ASSET_DISPOSAL: CashFlowActivity.INVESTING,
    SourceKind.ASSET_DEPRECIATION: CashFlowActivity.INVESTING,
    SourceKind.MANUAL: None,
}

# Manual journal entries are how owners' capital and loans are booked
MANUAL_TYPE_ACTIVITY: dict[TransactionType, CashFlowActivity] = {
    TransactionType.JOURNAL: CashFlowActivity.FINANCING,
    TransactionType.INVOICE: CashFlowActivity.OPERATING,
    TransactionType.PAYMENT: CashFlowActivity.OPERATING,
    TransactionType.ADJUSTMENT: CashFlowActivity.OPERATING,
    TransactionType.RECURRING: CashFlowActivity.OPERATING,
}

# (label, upper bound in days overdue); None is open-ended
AGING_BUCKETS = [
    ("current", 0),
    ("1_30", 30),
    ("31_60", 60),
    ("61_90", 90),
    ("over_90", None),
]


def classify_cash_activity(
    source_type: SourceKind, transaction_type: TransactionType
) -> CashFlowActivity:
    activity = SOURCE_ACTIVITY[source_type]
    if activity is None:
        activity = MANUAL_TYPE_ACTIVITY[transaction_type]
    return activity


def aging_bucket(days_overdue: int) -> str:
    for label, limit in AGING_BUCKETS:
        if limit is None or days_overdue <= limit:
            return label
    return AGING_BUCKETS[-1][0]


class ReportService:

    def __init__(
        self,
        db: Session,
        settings: Settings | None = None,
        locale: str | None = None,
    ):
        self.db = db
        self.settings = settings or get_settings()
        self.locale = locale

    # --- Trial Balance ---

    def trial_balance(self, as_of: date | None = None) -> TrialBalanceReport:
        """
        Every active account with its own balance in the debit or
        credit column, plus inactive accounts that still hold a
        balance. Opening balances that do not offset each other
        are balanced by an opening balance equity line.
        """
        as_of = as_of or date.today()
        tree = load_tree(self.db)
        own = own_balances(self.db, tree, as_of=as_of)

        rows = []
        for node in tree.sorted_nodes():
            balance = own[node.id]
            if not node.is_active and balance == 0:
                continue
            debit, credit = self._columns(node.account_type, balance)
            rows.append(TrialBalanceRow(
                account_id=node.id,
                code=node.code,
                name=self._label(node),
                account_type=node.account_type,
                balance=balance,
                debit=debit,
                credit=credit,
            ))

        offset = self._opening_offset(tree)
        if offset:
            debit, credit = self._columns(AccountType.EQUITY, offset)
            rows.append(TrialBalanceRow(
                account_id=None,
                code=None,
                name=OPENING_BALANCE_EQUITY,
                account_type=AccountType.EQUITY,
                balance=offset,
                debit=debit,
                credit=credit,
            ))

        total_debit = sum((r.debit for r in rows), ZERO)
        total_credit = sum((r.credit for r in rows), ZERO)
        if total_debit != total_credit:
            logger.warning(
                "Trial balance as of %s is off: debit %s, credit %s",
                as_of, total_debit, total_credit,
            )
        logger.debug("Trial balance as of %s: %d rows", as_of, len(rows))
        return TrialBalanceReport(
            as_of=as_of,
            rows=rows,
            total_debit=total_debit,
            total_credit=total_credit,
            balanced=total_debit == total_credit,
        )

    # --- Balance Sheet ---

    def balance_sheet(self, as_of: date | None = None) -> BalanceSheetReport:
        """Assets against liabilities plus equity, as of a date."""
        as_of = as_of or date.today()
        tree = load_tree(self.db)
        own = own_balances(self.db, tree, as_of=as_of)

        assets = self._sections(tree, own, AccountType.ASSET, ASSET_SECTIONS)
        liabilities = self._sections(
            tree, own, AccountType.LIABILITY, LIABILITY_SECTIONS
        )

        equity_lines = self._lines(tree, own, [
            n for n in tree.sorted_nodes() if n.account_type == AccountType.EQUITY
        ])
        offset = self._opening_offset(tree)
        if offset:
            equity_lines.append(ReportLine(label=OPENING_BALANCE_EQUITY, amount=offset))
        net_income = self._total(tree, own, AccountType.REVENUE) - self._total(
            tree, own, AccountType.EXPENSE
        )
        if net_income:
            equity_lines.append(ReportLine(label=NET_INCOME, amount=net_income))
        equity = ReportSection(
            label="Equity",
            lines=equity_lines,
            total=sum((line.amount for line in equity_lines), ZERO),
        )

        total_assets = sum((s.total for s in assets), ZERO)
        total_liabilities = sum((s.total for s in liabilities), ZERO)
        total_both = total_liabilities + equity.total
        return BalanceSheetReport(
            as_of=as_of,
            assets=assets,
            liabilities=liabilities,
            equity=equity,
            total_assets=total_assets,
            total_liabilities=total_liabilities,
            total_equity=equity.total,
            total_liabilities_and_equity=total_both,
            balanced=total_assets == total_both,
        )

    # --- Income Statement ---

    def income_statement(
        self,
        start: date | None = None,
        end: date | None = None,
        cost_center_id: int | None = None,
    ) -> IncomeStatementReport:
        """
        Revenue and expense movements dated within [start, end].

        Defaults to the calendar year to date.
        """
        end = end or date.today()
        start = start or date(end.year, 1, 1)
        self._check_range(start, end)

        tree = load_tree(self.db)
        ids = [
            n.id for n in tree.nodes.values()
            if n.account_type in (AccountType.REVENUE, AccountType.EXPENSE)
        ]
        moved = signed_movements(
            self.db, tree, start=start, end=end,
            account_ids=ids, cost_center_id=cost_center_id,
        )

        revenue = self._sections(tree, moved, AccountType.REVENUE, REVENUE_SECTIONS)
        expenses = self._sections(tree, moved, AccountType.EXPENSE, EXPENSE_SECTIONS)
        total_revenue = sum((s.total for s in revenue), ZERO)
        total_expenses = sum((s.total for s in expenses), ZERO)
        cogs = sum(
            (
                moved.get(n.id, ZERO) for n in tree.nodes.values()
                if n.account_type == AccountType.EXPENSE
                and n.subtype == AccountSubtype.COST_OF_GOODS_SOLD
            ),
            ZERO,
        )
        return IncomeStatementReport(
            start_date=start,
            end_date=end,
            cost_center_id=cost_center_id,
            revenue=revenue,
            expenses=expenses,
            total_revenue=total_revenue,
            cost_of_goods_sold=cogs,
            total_expenses=total_expenses,
            gross_profit=total_revenue - cogs,
            net_profit=total_revenue - total_expenses,
        )

    # --- Cash Flow ---

    def cash_flow_statement(
        self, start: date | None = None, end: date | None = None
    ) -> CashFlowReport:
        """
        Movements on cash and bank accounts, grouped by activity.

        opening_cash + net_change == closing_cash always holds;
        reconciled also checks the closing figure against the
        balances derived independently as of end.
        """
        end = end or date.today()
        start = start or date(end.year, 1, 1)
        self._check_range(start, end)

        tree = load_tree(self.db)
        cash_ids = [
            n.id for n in tree.nodes.values()
            if n.account_type == AccountType.ASSET
            and n.subtype in AccountSubtype.CASH_SUBTYPES
        ]
        opening = own_balances(
            self.db, tree, as_of=start - timedelta(days=1), account_ids=cash_ids
        )
        closing = own_balances(self.db, tree, as_of=end, account_ids=cash_ids)
        opening_cash = sum(opening.values(), ZERO)

        inflows: dict[CashFlowActivity, Decimal] = defaultdict(lambda: ZERO)
        outflows: dict[CashFlowActivity, Decimal] = defaultdict(lambda: ZERO)
        if cash_ids:
            rows = self.db.execute(
                select(
                    Transaction.source_type,
                    Transaction.transaction_type,
                    TransactionEntry.debit_amount,
                    TransactionEntry.credit_amount,
                )
                .join(Transaction, TransactionEntry.transaction_id == Transaction.id)
                .where(
                    TransactionEntry.account_id.in_(cash_ids),
                    Transaction.transaction_date >= start,
                    Transaction.transaction_date <= end,
                )
            )
            for source_type, transaction_type, debit, credit in rows:
                activity = classify_cash_activity(source_type, transaction_type)
                inflows[activity] += Decimal(debit)
                outflows[activity] += Decimal(credit)

        activities = []
        for activity in CashFlowActivity:
            net = inflows[activity] - outflows[activity]
            activities.append(ReportSection(
                label=activity.value,
                lines=[
                    ReportLine(label="Inflows", amount=inflows[activity]),
                    ReportLine(label="Outflows", amount=-outflows[activity]),
                ],
                total=net,
            ))

        net_change = sum((s.total for s in activities), ZERO)
        closing_cash = opening_cash + net_change
        return CashFlowReport(
            start_date=start,
            end_date=end,
            opening_cash=opening_cash,
            activities=activities,
            net_change=net_change,
            closing_cash=closing_cash,
            reconciled=closing_cash == sum(closing.values(), ZERO),
        )

    # --- Aging ---

    def aged_receivables(self, as_of: date | None = None) -> AgingReport:
        """Open customer invoices by days past due."""
        return self._aging(
            as_of, AccountSubtype.ACCOUNTS_RECEIVABLE, "receivables"
        )

    def aged_payables(self, as_of: date | None = None) -> AgingReport:
        """Open supplier invoices by days past due."""
        return self._aging(as_of, AccountSubtype.ACCOUNTS_PAYABLE, "payables")

    def _aging(self, as_of: date | None, subtype: str, kind: str) -> AgingReport:
        """
        Group invoice-sourced movements on receivable or payable
        accounts by invoice. Whatever is left unsettled as of the
        date is aged from the invoice's due date (or its first
        transaction date when no due date was given).
        """
        as_of = as_of or date.today()
        tree = load_tree(self.db)
        account_ids = [n.id for n in tree.nodes.values() if n.subtype == subtype]

        outstanding: dict[int, Decimal] = defaultdict(lambda: ZERO)
        due_dates: dict[int, date] = {}
        first_seen: dict[int, tuple[date, int, str]] = {}
        if account_ids:
            rows = self.db.execute(
                select(
                    Transaction.source_id,
                    Transaction.id,
                    Transaction.reference_number,
                    Transaction.transaction_date,
                    Transaction.due_date,
                    TransactionEntry.account_id,
                    TransactionEntry.debit_amount,
                    TransactionEntry.credit_amount,
                )
                .join(Transaction, TransactionEntry.transaction_id == Transaction.id)
                .where(
                    TransactionEntry.account_id.in_(account_ids),
                    Transaction.source_type == SourceKind.INVOICE,
                    Transaction.source_id.is_not(None),
                    Transaction.transaction_date <= as_of,
                )
            )
            for (invoice_id, txn_id, reference, txn_date, due_date,
                 account_id, debit, credit) in rows:
                outstanding[invoice_id] += signed_amount(
                    tree[account_id].account_type, Decimal(debit), Decimal(credit)
                )
                if due_date is not None:
                    due_dates[invoice_id] = min(
                        due_dates.get(invoice_id, due_date), due_date
                    )
                seen = (txn_date, txn_id, reference)
                if invoice_id not in first_seen or seen < first_seen[invoice_id]:
                    first_seen[invoice_id] = seen

        items = []
        for invoice_id, amount in sorted(outstanding.items()):
            if amount <= 0:
                continue
            first_date, _, reference = first_seen[invoice_id]
            due = due_dates.get(invoice_id, first_date)
            days = (as_of - due).days
            items.append(AgingItem(
                invoice_id=invoice_id,
                reference_number=reference,
                due_date=due,
                days_overdue=max(days, 0),
                outstanding=amount,
                bucket=aging_bucket(days),
            ))

        buckets = []
        for label, _ in AGING_BUCKETS:
            in_bucket = [i for i in items if i.bucket == label]
            buckets.append(AgingBucket(
                label=label,
                amount=sum((i.outstanding for i in in_bucket), ZERO),
                count=len(in_bucket),
            ))

        return AgingReport(
            as_of=as_of,
            kind=kind,
            buckets=buckets,
            items=items,
            total=sum((i.outstanding for i in items), ZERO),
        )

    # --- General Ledger ---

    def general_ledger(
        self,
        account_id: int,
        start: date | None = None,
        end: date | None = None,
    ) -> GeneralLedgerReport:
        """
        Entries on one account with a running balance.

        The running balance starts from the account's own balance
        at the end of the day before start.
        """
        end = end or date.today()
        start = start or date(end.year, 1, 1)
        self._check_range(start, end)

        tree = load_tree(self.db)
        if account_id not in tree:
            raise NotFoundError(f"Account {account_id} not found")
        node = tree[account_id]

        opening = own_balances(
            self.db, tree, as_of=start - timedelta(days=1), account_ids=[account_id]
        )[account_id]

        rows = self.db.execute(
            select(
                Transaction.id,
                Transaction.transaction_date,
                Transaction.reference_number,
                Transaction.description,
                Transaction.description_local,
                TransactionEntry.debit_amount,
                TransactionEntry.credit_amount,
            )
            .join(Transaction, TransactionEntry.transaction_id == Transaction.id)
            .where(
                TransactionEntry.account_id == account_id,
                Transaction.transaction_date >= start,
                Transaction.transaction_date <= end,
            )
            .order_by(Transaction.transaction_date, Transaction.id, TransactionEntry.id)
        )

        running = opening
        lines = []
        for (txn_id, txn_date, reference, description, description_local,
             debit, credit) in rows:
            running += signed_amount(node.account_type, Decimal(debit), Decimal(credit))
            use_local = (
                self.locale == self.settings.LOCAL_LANGUAGE and description_local
            )
            lines.append(GeneralLedgerLine(
                transaction_id=txn_id,
                transaction_date=txn_date,
                reference_number=reference,
                description=description_local if use_local else description,
                debit=debit,
                credit=credit,
                balance=running,
            ))

        return GeneralLedgerReport(
            account_id=node.id,
            account_code=node.code,
            account_name=self._label(node),
            start_date=start,
            end_date=end,
            opening_balance=opening,
            lines=lines,
            closing_balance=running,
        )

    # --- Cost Centers ---

    def cost_center_summary(
        self, start: date | None = None, end: date | None = None
    ) -> CostCenterSummaryReport:
        """Revenue, expenses and net per cost center for a period."""
        end = end or date.today()
        start = start or date(end.year, 1, 1)
        self._check_range(start, end)

        tree = load_tree(self.db)
        rows = self.db.execute(
            select(
                Transaction.cost_center_id,
                TransactionEntry.account_id,
                TransactionEntry.debit_amount,
                TransactionEntry.credit_amount,
            )
            .join(Transaction, TransactionEntry.transaction_id == Transaction.id)
            .where(
                Transaction.transaction_date >= start,
                Transaction.transaction_date <= end,
            )
        )

        revenue: dict[int | None, Decimal] = defaultdict(lambda: ZERO)
        expenses: dict[int | None, Decimal] = defaultdict(lambda: ZERO)
        for cost_center_id, account_id, debit, credit in rows:
            node = tree[account_id]
            amount = signed_amount(node.account_type, Decimal(debit), Decimal(credit))
            if node.account_type == AccountType.REVENUE:
                revenue[cost_center_id] += amount
            elif node.account_type == AccountType.EXPENSE:
                expenses[cost_center_id] += amount

        centers = self.db.execute(
            select(CostCenter).order_by(CostCenter.code)
        ).scalars().all()
        summary = []
        for center in centers:
            if center.id not in revenue and center.id not in expenses:
                continue
            name = center.name
            if self.locale == self.settings.LOCAL_LANGUAGE and center.name_local:
                name = center.name_local
            summary.append(self._summary_row(
                center.id, center.code, name,
                revenue[center.id], expenses[center.id],
            ))
        if None in revenue or None in expenses:
            summary.append(self._summary_row(
                None, None, "Unassigned", revenue[None], expenses[None]
            ))

        return CostCenterSummaryReport(start_date=start, end_date=end, rows=summary)

    # --- Helpers ---

    @staticmethod
    def _summary_row(cost_center_id, code, name, revenue, expenses):
        return CostCenterSummaryRow(
            cost_center_id=cost_center_id,
            code=code,
            name=name,
            revenue=revenue,
            expenses=expenses,
            net=revenue - expenses,
        )

    @staticmethod
    def _check_range(start: date, end: date) -> None:
        if start > end:
            raise ValidationError(f"Start date {start} is after end date {end}")

    @staticmethod
    def _columns(account_type: AccountType, balance: Decimal):
        """(debit, credit) for a balance; negatives swap columns."""
        if account_type.is_debit_normal:
            return (balance, ZERO) if balance >= 0 else (ZERO, -balance)
        return (ZERO, balance) if balance >= 0 else (-balance, ZERO)

    @staticmethod
    def _opening_offset(tree: AccountTree) -> Decimal:
        """Debit-normal openings minus credit-normal openings."""
        offset = ZERO
        for node in tree.nodes.values():
            if node.account_type.is_debit_normal:
                offset += node.opening_balance
            else:
                offset -= node.opening_balance
        return offset

    def _label(self, node: AccountNode) -> str:
        return node.label(self.locale, self.settings.LOCAL_LANGUAGE)

    def _lines(
        self,
        tree: AccountTree,
        amounts: dict[int, Decimal],
        nodes: list[AccountNode],
    ) -> list[ReportLine]:
        return [
            ReportLine(
                label=self._label(n),
                amount=amounts.get(n.id, ZERO),
                account_id=n.id,
                code=n.code,
            )
            for n in nodes
            if amounts.get(n.id, ZERO)
        ]

    def _sections(
        self,
        tree: AccountTree,
        amounts: dict[int, Decimal],
        account_type: AccountType,
        layout: list[tuple[str | None, str]],
    ) -> list[ReportSection]:
        """Split accounts of one type into sections by subtype."""
        known = {subtype for subtype, _ in layout if subtype is not None}
        sections = []
        for subtype, label in layout:
            nodes = [
                n for n in tree.sorted_nodes()
                if n.account_type == account_type
                and (n.subtype == subtype if subtype else n.subtype not in known)
            ]
            lines = self._lines(tree, amounts, nodes)
            if lines:
                sections.append(ReportSection(
                    label=label,
                    lines=lines,
                    total=sum((line.amount for line in lines), ZERO),
                ))
        return sections

    @staticmethod
    def _total(
        tree: AccountTree, amounts: dict[int, Decimal], account_type: AccountType
    ) -> Decimal:
        return sum(
            (
                amounts.get(n.id, ZERO) for n in tree.nodes.values()
                if n.account_type == account_type
            ),
            ZERO,
        )
