"""
Currency service.

Rates are stored relative to a single base currency whose own
rate is always 1. The first currency registered becomes the
base; set_base moves the flag and rescales every other rate.
"""

import logging
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from jewelry_ledger.config import RATE_PLACES
from jewelry_ledger.exceptions import NoOpError, NotFoundError, ValidationError
from jewelry_ledger.models.currency import Currency
from jewelry_ledger.schemas.currency import CurrencyCreate
from jewelry_ledger.services.audit import record_audit

logger = logging.getLogger(__name__)

ONE = Decimal("1")


class CurrencyService:

    def __init__(self, db: Session):
        self.db = db

    def get_currency(self, code: str) -> Currency:
        currency = self._find(code)
        if not currency:
            raise NotFoundError(f"Currency {code.upper()} not found")
        return currency

    def list_currencies(self) -> list[Currency]:
        return list(
            self.db.execute(select(Currency).order_by(Currency.code)).scalars()
        )

    def get_base(self) -> Currency | None:
        return self.db.execute(
            select(Currency).where(Currency.is_base.is_(True))
        ).scalar_one_or_none()

    def register_currency(self, request: CurrencyCreate) -> Currency:
        """
        Add a currency.

        It becomes the base if asked to, or if no base exists yet.
        """
        if self._find(request.code):
            raise ValidationError(f"Currency {request.code} already exists")

        currency = Currency(
            code=request.code,
            name=request.name,
            exchange_rate=request.exchange_rate.quantize(RATE_PLACES),
            is_base=False,
        )
        self.db.add(currency)
        self.db.flush()

        if request.is_base or self.get_base() is None:
            self._make_base(currency)

        record_audit(self.db, "currency.registered", "currency", currency.id, {
            "code": currency.code,
            "rate": currency.exchange_rate,
            "is_base": currency.is_base,
        })
        return currency

    def set_base(self, code: str) -> Currency:
        """Make this currency the base and rescale the others to it."""
        currency = self.get_currency(code)
        if currency.is_base:
            raise NoOpError(f"Currency {currency.code} is already the base")
        self._make_base(currency)
        record_audit(self.db, "currency.base_changed", "currency", currency.id, {
            "code": currency.code,
        })
        logger.info("Base currency is now %s", currency.code)
        return currency

    def rate_for(self, code: str) -> Decimal:
        """Rate of a currency against the base; 1 when unknown."""
        currency = self._find(code)
        if currency is None or currency.is_base:
            return ONE
        return currency.exchange_rate

    def _find(self, code: str) -> Currency | None:
        return self.db.execute(
            select(Currency).where(Currency.code == code.upper())
        ).scalar_one_or_none()

    def _make_base(self, currency: Currency) -> None:
        pivot = currency.exchange_rate
        for other in self.list_currencies():
            if other.id == currency.id:
                continue
            other.is_base = False
            other.exchange_rate = (other.exchange_rate / pivot).quantize(RATE_PLACES)
        # Clear the old flag before setting the new one so there is
        # never a moment with two bases in the flushed state
        self.db.flush()
        currency.is_base = True
        currency.exchange_rate = ONE
        self.db.flush()
