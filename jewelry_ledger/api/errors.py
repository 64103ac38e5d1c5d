"""Translate ledger errors into HTTP responses."""

from fastapi import HTTPException

from jewelry_ledger.exceptions import LedgerError


def http_error(error: LedgerError) -> HTTPException:
    """Use the error's own status code; retryable errors get Retry-After."""
    headers = {"Retry-After": "1"} if error.retryable else None
    return HTTPException(
        status_code=error.status_code, detail=error.message, headers=headers
    )
