"""Service errors with a stable code, HTTP status and structured details."""

from __future__ import annotations

from typing import Any


class LedgerError(Exception):
    """Base class for all service errors."""

    code = "ledger_error"
    http_status = 500

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_response(self) -> dict[str, Any]:
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
            }
        }


class ValidationError(LedgerError):
    """Malformed input: non-positive amount, blank destination, bad setting value."""

    code = "validation_error"
    http_status = 422


class NotFoundError(LedgerError):
    code = "not_found"
    http_status = 404

    def __init__(self, resource: str, identifier: str) -> None:
        super().__init__(f"{resource} not found: {identifier}", resource=resource, id=identifier)


class InvalidStateError(LedgerError):
    """A withdrawal was asked to leave a terminal status."""

    code = "invalid_state"
    http_status = 409

    def __init__(self, withdrawal_id: str, status: str) -> None:
        super().__init__(
            f"withdrawal {withdrawal_id} is already {status}",
            id=withdrawal_id,
            status=status,
        )


class FrozenAccountError(LedgerError):
    code = "account_frozen"
    http_status = 409

    def __init__(self, account_id: str) -> None:
        super().__init__(f"account {account_id} is frozen", account_id=account_id)


class InsufficientFundsError(LedgerError):
    code = "insufficient_funds"
    http_status = 409

    def __init__(self, account_id: str, balance: int, requested: int) -> None:
        super().__init__(
            f"account {account_id} holds {balance}, {requested} requested",
            account_id=account_id,
            balance=balance,
            requested=requested,
        )
        self.balance = balance
        self.requested = requested


class PolicyViolationError(LedgerError):
    """Withdrawal value in the reference currency is below the configured floor."""

    code = "policy_violation"
    http_status = 422

    def __init__(self, value: float, floor: float) -> None:
        super().__init__(
            f"estimated value {value} is below the minimum withdrawal value {floor}",
            value=value,
            floor=floor,
        )
        self.value = value
        self.floor = floor


class UpstreamUnavailableError(LedgerError):
    code = "upstream_unavailable"
    http_status = 503

    def __init__(self, message: str, source: str = "price") -> None:
        super().__init__(message, source=source)


class PersistenceError(LedgerError):
    code = "persistence_error"
    http_status = 500

    def __init__(self, message: str, operation: str = "unknown") -> None:
        super().__init__(message, operation=operation)


class ConflictError(LedgerError):
    code = "conflict"
    http_status = 409


class AuthenticationError(LedgerError):
    code = "authentication_failed"
    http_status = 401


class PermissionDeniedError(LedgerError):
    code = "permission_denied"
    http_status = 403


__all__ = [
    "AuthenticationError",
    "ConflictError",
    "FrozenAccountError",
    "InsufficientFundsError",
    "InvalidStateError",
    "LedgerError",
    "NotFoundError",
    "PermissionDeniedError",
    "PersistenceError",
    "PolicyViolationError",
    "UpstreamUnavailableError",
    "ValidationError",
]
