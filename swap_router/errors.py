"""Swap router error classes.

Each error carries a machine-readable ``code`` and the HTTP status the API
answers with when it escapes to a caller.
"""


class SwapRouterError(Exception):
    """Base error for swap routing operations."""

    code = "swap_router_error"
    status_code = 500

    def details(self) -> dict[str, object]:
        """Extra fields for the API error envelope."""
        return {}


class UnknownTokenError(SwapRouterError):
    """Symbol is not present in the token registry."""

    code = "unknown_token"
    status_code = 400

    def __init__(self, symbol: str) -> None:
        super().__init__(f"Token {symbol} not supported")
        self.symbol = symbol


class InvalidParametersError(SwapRouterError):
    """Request failed validation before any ledger interaction."""

    code = "invalid_parameters"
    status_code = 400


class InvalidSignerError(InvalidParametersError):
    """Signer is malformed or does not control the requested owner."""

    code = "invalid_signer"


class InvalidPoolError(SwapRouterError):
    """Pool does not trade the requested token pair."""

    code = "invalid_pool"
    status_code = 422


class InsufficientBalanceError(SwapRouterError):
    """Owner's native balance does not cover the operation plus fees."""

    code = "insufficient_balance"
    status_code = 400


class AccountProvisioningError(SwapRouterError):
    """Creating the owner's token accounts was rejected.

    Fatal for the request: the owner's setup is broken, so trying another
    pool would not help.
    """

    code = "account_provisioning_failed"
    status_code = 502

    def __init__(self, message: str, accounts: list[str] | None = None) -> None:
        super().__init__(message)
        self.accounts = accounts or []

    def details(self) -> dict[str, object]:
        return {"accounts": self.accounts}


class LedgerError(SwapRouterError):
    """A ledger client call failed (network, rejection, missing state)."""

    code = "ledger_error"
    status_code = 502


class RouteFailedError(SwapRouterError):
    """Every candidate pool failed (or there were none).

    Raised at the service boundary; the orchestrator itself reports this as
    an ``all_failed`` result.
    """

    code = "all_failed"
    status_code = 422

    def __init__(
        self, message: str, failures: list[dict[str, object]], reason: str | None = None
    ) -> None:
        super().__init__(message)
        self.failures = failures
        if reason is not None:
            self.code = reason

    def details(self) -> dict[str, object]:
        return {"failures": self.failures}


class OutcomeUnknownError(SwapRouterError):
    """A submitting call outlived the request timeout.

    The ledger operation keeps running in its worker thread and may still
    land, so the caller must check balances before retrying.
    """

    code = "timeout_outcome_unknown"
    status_code = 504
