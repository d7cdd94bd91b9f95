"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Input validation / batch shape
  2xxx: Balance
  3xxx: Chain / wallet
  9xxx: System
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Validation ---

class ValidationError(AppError):
    def __init__(self, field: str, errors: list[str]) -> None:
        self.field = field
        self.errors = list(errors)
        super().__init__(1001, f"Invalid {field}: {', '.join(errors)}", 422)


class BatchTooLargeError(AppError):
    def __init__(self, size: int, max_size: int) -> None:
        super().__init__(
            1002,
            f"Too many orders: {size}. Maximum {max_size} orders per batch.",
            422,
        )


class NoValidOrdersError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "No valid orders to create", 422)


# --- 2xxx: Balance ---

class InsufficientBalanceError(AppError):
    def __init__(self, token_id: int, required: int, available: int) -> None:
        super().__init__(
            2001,
            f"Insufficient balance for token {token_id}: have {available}, need {required}",
            422,
        )


# --- 3xxx: Chain / wallet ---

class ApprovalFailedError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(3001, f"Failed to approve marketplace: {detail}", 502)


class SubmissionFailedError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(3002, f"All transaction attempts failed: {detail}", 502)


class WalletNotConnectedError(AppError):
    def __init__(self) -> None:
        super().__init__(3003, "Wallet not connected", 409)


class WrongNetworkError(AppError):
    def __init__(self, chain_id: int | None, expected_chain_id: int) -> None:
        self.chain_id = chain_id
        self.expected_chain_id = expected_chain_id
        super().__init__(
            3004,
            f"Connected to chain {chain_id}, expected chain {expected_chain_id}",
            409,
        )


# --- 9xxx: System ---

class RateLimitError(AppError):
    def __init__(self, reset_time_seconds: int) -> None:
        self.reset_time_seconds = reset_time_seconds
        super().__init__(
            9001,
            f"Rate limit exceeded. Try again in {reset_time_seconds} seconds.",
            429,
        )
