# frontend/streamlit_app/core/errors.py
# SPDX-License-Identifier: Apache-2.0
"""Error taxonomy shared by the services, the console and the backend.

Pre-flight errors (`WalletNotConnected`, `InvalidAmount`, `InsufficientFunds`,
`InsufficientGas`) are raised before any transaction is submitted. Chain and
HTTP failures are translated into `TransactionRejected`, `ContractReverted`,
`StorageError` or `GatewayError` at the service boundary.

`AnalysisParseError` never leaves `services.guardian`: an unparseable model
answer is replaced by the fixed fallback analysis there.
"""

from __future__ import annotations


class VerifundError(Exception):
    """Base class for every error raised by Verifund services."""


class WalletNotConnected(VerifundError):
    def __init__(self, message: str = "Wallet not connected") -> None:
        super().__init__(message)


class InvalidAmount(VerifundError, ValueError):
    """Amount string is not a non-negative finite decimal within precision."""


class InsufficientFunds(VerifundError):
    """Token balance is lower than the requested amount."""


class InsufficientGas(VerifundError):
    """Native balance is too low to pay transaction fees."""


class TransactionRejected(VerifundError):
    def __init__(self, message: str = "Transaction was rejected in the wallet") -> None:
        super().__init__(message)


class ContractReverted(VerifundError):
    """A transaction or call reverted. `reason` is the contract's message, if any."""

    GENERIC_MESSAGE = "Transaction failed"

    def __init__(self, reason: str | None = None) -> None:
        self.reason = reason
        super().__init__(f"Transaction failed: {reason}" if reason else self.GENERIC_MESSAGE)


class StorageError(VerifundError):
    """Pinning or fetching from the metadata store failed."""


class GatewayError(VerifundError):
    """The payment gateway answered with a non-success HTTP status."""

    def __init__(self, status_code: int, message: str = "") -> None:
        self.status_code = status_code
        super().__init__(f"IDRX API Error: {status_code} {message}".rstrip())


class AnalysisParseError(VerifundError):
    """Risk model answer is not valid analysis JSON."""


class AnalysisUnavailable(VerifundError):
    """Risk model could not be reached or answered with an HTTP error."""
