"""Tests for the currency registry."""

from decimal import Decimal

import pytest
from sqlalchemy import func, select

from jewelry_ledger.exceptions import NoOpError, NotFoundError, ValidationError
from jewelry_ledger.models.currency import Currency
from jewelry_ledger.models.enums import AccountType
from jewelry_ledger.schemas.account import AccountCreate
from jewelry_ledger.schemas.currency import CurrencyCreate
from jewelry_ledger.schemas.transaction import (
    TransactionDraft,
    TransactionEntryCreate,
)
from jewelry_ledger.services.account_service import AccountService
from jewelry_ledger.services.currency_service import CurrencyService
from jewelry_ledger.services.ledger_service import LedgerService


def count_bases(db):
    return db.execute(
        select(func.count(Currency.id)).where(Currency.is_base.is_(True))
    ).scalar()


class TestRegisterCurrency:

    def test_first_currency_becomes_base(self, db_session):
        service = CurrencyService(db_session)
        usd = service.register_currency(CurrencyCreate(code="usd", name="US Dollar"))
        eur = service.register_currency(CurrencyCreate(
            code="EUR", name="Euro", exchange_rate=Decimal("0.9")
        ))

        assert usd.code == "USD"
        assert usd.is_base is True
        assert eur.is_base is False
        assert service.get_base().code == "USD"
        assert count_bases(db_session) == 1

    def test_duplicate_rejected(self, db_session):
        service = CurrencyService(db_session)
        service.register_currency(CurrencyCreate(code="USD", name="US Dollar"))

        with pytest.raises(ValidationError):
            service.register_currency(CurrencyCreate(code="USD", name="Dollar"))

    def test_rate_for(self, db_session):
        service = CurrencyService(db_session)
        service.register_currency(CurrencyCreate(code="USD", name="US Dollar"))
        service.register_currency(CurrencyCreate(
            code="IRR", name="Iranian Rial", exchange_rate=Decimal("42000")
        ))

        assert service.rate_for("USD") == Decimal("1")
        assert service.rate_for("IRR") == Decimal("42000")
        assert service.rate_for("GBP") == Decimal("1")


class TestSetBase:

    def test_set_base_rescales_rates(self, db_session):
        service = CurrencyService(db_session)
        usd = service.register_currency(CurrencyCreate(code="USD", name="US Dollar"))
        eur = service.register_currency(CurrencyCreate(
            code="EUR", name="Euro", exchange_rate=Decimal("0.8")
        ))

        service.set_base("EUR")

        assert eur.is_base is True
        assert eur.exchange_rate == Decimal("1")
        assert usd.is_base is False
        assert usd.exchange_rate == Decimal("1.25")
        assert count_bases(db_session) == 1

    def test_set_base_on_base_is_noop(self, db_session):
        service = CurrencyService(db_session)
        service.register_currency(CurrencyCreate(code="USD", name="US Dollar"))

        with pytest.raises(NoOpError):
            service.set_base("USD")

    def test_unknown_currency(self, db_session):
        with pytest.raises(NotFoundError):
            CurrencyService(db_session).set_base("XYZ")


class TestTransactionRate:

    def test_draft_takes_registered_rate(self, db_session):
        currencies = CurrencyService(db_session)
        currencies.register_currency(CurrencyCreate(code="USD", name="US Dollar"))
        currencies.register_currency(CurrencyCreate(
            code="EUR", name="Euro", exchange_rate=Decimal("0.9")
        ))
        accounts = AccountService(db_session)
        cash = accounts.register_account(AccountCreate(
            code="1110", name="Cash", account_type=AccountType.ASSET
        ))
        sales = accounts.register_account(AccountCreate(
            code="4110", name="Sales", account_type=AccountType.REVENUE
        ))

        txn = LedgerService(db_session).create_transaction(TransactionDraft(
            description="Euro sale",
            currency="EUR",
            entries=[
                TransactionEntryCreate(account_id=cash.id, debit_amount=Decimal("100")),
                TransactionEntryCreate(account_id=sales.id, credit_amount=Decimal("100")),
            ],
        ))

        assert txn.exchange_rate == Decimal("0.9")
