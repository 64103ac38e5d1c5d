"""Tests for the cost center registry."""

from datetime import date
from decimal import Decimal

import pytest

from jewelry_ledger.exceptions import (
    ConflictError,
    NoOpError,
    NotFoundError,
    ValidationError,
)
from jewelry_ledger.models.enums import AccountType
from jewelry_ledger.models.fixed_asset import FixedAsset
from jewelry_ledger.schemas.account import AccountCreate
from jewelry_ledger.schemas.cost_center import CostCenterCreate, CostCenterUpdate
from jewelry_ledger.schemas.transaction import (
    TransactionDraft,
    TransactionEntryCreate,
)
from jewelry_ledger.services.account_service import AccountService
from jewelry_ledger.services.cost_center_service import CostCenterService
from jewelry_ledger.services.ledger_service import LedgerService


def make_center(service, code="WS", name="Workshop"):
    return service.register(CostCenterCreate(code=code, name=name))


def post_to(db, cost_center_id):
    accounts = AccountService(db)
    cash = accounts.register_account(AccountCreate(
        code="1110", name="Cash", account_type=AccountType.ASSET
    ))
    sales = accounts.register_account(AccountCreate(
        code="4110", name="Sales", account_type=AccountType.REVENUE
    ))
    return LedgerService(db).create_transaction(TransactionDraft(
        description="Sale",
        cost_center_id=cost_center_id,
        entries=[
            TransactionEntryCreate(account_id=cash.id, debit_amount=Decimal("10")),
            TransactionEntryCreate(account_id=sales.id, credit_amount=Decimal("10")),
        ],
    ))


class TestRegister:

    def test_register(self, db_session):
        center = make_center(CostCenterService(db_session))
        db_session.commit()

        assert center.id is not None
        assert center.is_active is True

    def test_duplicate_code_rejected(self, db_session):
        service = CostCenterService(db_session)
        make_center(service)

        with pytest.raises(ValidationError, match="already exists"):
            make_center(service, name="Another workshop")

    def test_update(self, db_session):
        service = CostCenterService(db_session)
        center = make_center(service)

        service.update(center.id, CostCenterUpdate(name="Main workshop", name_local="کارگاه"))

        assert center.name == "Main workshop"
        assert center.name_local == "کارگاه"

    def test_list_and_get(self, db_session):
        service = CostCenterService(db_session)
        make_center(service, "STORE", "Store")
        make_center(service, "WS", "Workshop")

        assert [c.code for c in service.list()] == ["STORE", "WS"]
        with pytest.raises(NotFoundError):
            service.get(999)


class TestDeactivate:

    def test_deactivate_twice_is_noop(self, db_session):
        service = CostCenterService(db_session)
        center = make_center(service)

        service.deactivate(center.id)
        with pytest.raises(NoOpError):
            service.deactivate(center.id)
        assert service.list(active_only=True) == []

    def test_inactive_center_rejects_postings(self, db_session):
        service = CostCenterService(db_session)
        center = make_center(service)
        service.deactivate(center.id)

        with pytest.raises(ValidationError, match="not active"):
            post_to(db_session, center.id)


class TestDelete:

    def test_delete_unused(self, db_session):
        service = CostCenterService(db_session)
        center = make_center(service)
        db_session.commit()

        service.delete(center.id)
        db_session.commit()

        with pytest.raises(NotFoundError):
            service.get(center.id)

    def test_delete_with_transactions_conflicts(self, db_session):
        service = CostCenterService(db_session)
        center = make_center(service)
        post_to(db_session, center.id)

        with pytest.raises(ConflictError, match="has transactions"):
            service.delete(center.id)

    def test_delete_with_fixed_assets_conflicts(self, db_session):
        service = CostCenterService(db_session)
        center = make_center(service)
        db_session.add(FixedAsset(
            code="EQ-01",
            name="Casting machine",
            cost_center_id=center.id,
            acquisition_cost=Decimal("12000"),
            acquired_on=date(2023, 6, 1),
        ))
        db_session.flush()

        with pytest.raises(ConflictError, match="has fixed assets"):
            service.delete(center.id)
