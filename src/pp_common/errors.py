"""Unified error codes and custom exceptions.

Every failure a command can hit is an AppError; the FastAPI handler in
src/main.py renders it as ApiResponse(code, message). Categories:

  ValidationError     bad input for the current state (wrong round, too small, duplicate)
  StateError          operation not possible right now (betting closed, nothing to claim)
  AuthorizationError  privileged operation from a non-privileged caller
  CollaboratorError   price feed / token transfer failure
  PausedError         gated operation while the market is paused

Error code ranges:
  1xxx: Auth/User
  2xxx: Account / transfers
  3xxx: Market / rounds
  4xxx: Bets / claims
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


class ValidationError(AppError):
    def __init__(self, code: int, message: str, http_status: int = 422) -> None:
        super().__init__(code, message, http_status)


class StateError(AppError):
    def __init__(self, code: int, message: str, http_status: int = 409) -> None:
        super().__init__(code, message, http_status)


class AuthorizationError(AppError):
    def __init__(self, code: int, message: str, http_status: int = 403) -> None:
        super().__init__(code, message, http_status)


class CollaboratorError(AppError):
    def __init__(self, code: int, message: str, http_status: int = 503) -> None:
        super().__init__(code, message, http_status)


class PausedError(AppError):
    def __init__(self, code: int, message: str, http_status: int = 423) -> None:
        super().__init__(code, message, http_status)


# --- 1xxx: Auth/User ---

class UsernameExistsError(AppError):
    def __init__(self) -> None:
        super().__init__(1001, "Username already exists", 409)


class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Invalid username or password", 401)


class AccountDisabledError(AppError):
    def __init__(self) -> None:
        super().__init__(1004, "Account is disabled", 403)


class InvalidRefreshTokenError(AppError):
    def __init__(self) -> None:
        super().__init__(1005, "Refresh token is invalid or expired", 401)


class AdminRequiredError(AuthorizationError):
    def __init__(self, user_id: str) -> None:
        super().__init__(1006, f"Only the admin can execute this function. Sender: {user_id}")


# --- 2xxx: Account / transfers ---

class InsufficientBalanceError(CollaboratorError):
    def __init__(self, required: int, available: int) -> None:
        super().__init__(
            2001,
            f"Insufficient balance: required {required}, available {available}",
            422,
        )


class AccountNotFoundError(CollaboratorError):
    def __init__(self, user_id: str) -> None:
        super().__init__(2002, f"Account not found for user {user_id}", 404)


# --- 3xxx: Market / rounds ---

class MarketNotInitializedError(StateError):
    def __init__(self) -> None:
        super().__init__(3001, "Market has not been initialized")


class MarketPausedError(PausedError):
    def __init__(self) -> None:
        super().__init__(3002, "Market is paused")


class NoBiddingRoundError(StateError):
    def __init__(self) -> None:
        super().__init__(3003, "No round is open for betting; advance the market first")


class RoundNotFoundError(ValidationError):
    def __init__(self, round_id: int) -> None:
        super().__init__(3004, f"Finished round not found: {round_id}", 404)


class InvalidConfigError(ValidationError):
    def __init__(self, detail: str) -> None:
        super().__init__(3005, f"Invalid market config: {detail}")


class InvalidPriceError(ValidationError):
    def __init__(self, price: int) -> None:
        super().__init__(3007, f"Oracle price must be positive, got {price}")


class PriceFeedUnavailableError(CollaboratorError):
    def __init__(self, detail: str) -> None:
        super().__init__(3006, f"Price feed unavailable: {detail}")


# --- 4xxx: Bets / claims ---

class WrongRoundError(ValidationError):
    def __init__(self, round_id: int, current_round_id: int) -> None:
        super().__init__(
            4001,
            f"Tried to bet on round {round_id} but it's currently round {current_round_id}",
        )


class BetBelowMinimumError(ValidationError):
    def __init__(self, amount: int, minimum: int) -> None:
        super().__init__(4002, f"Bet amount {amount} is below the minimum bet {minimum}")


class BettingClosedError(StateError):
    def __init__(self, round_id: int, seconds_ago: int) -> None:
        super().__init__(
            4003,
            f"Round {round_id} stopped accepting bids {seconds_ago} second(s) ago; "
            "the next round has not yet begun",
        )


class DuplicateBetError(ValidationError):
    def __init__(self, round_id: int, direction: str, amount: int) -> None:
        super().__init__(
            4004,
            f"Already bet on round {round_id} for {direction}, with amount: {amount}",
            409,
        )


class PageLimitExceededError(ValidationError):
    def __init__(self, limit: int, maximum: int) -> None:
        super().__init__(4005, f"Page limit must be between 1 and {maximum}, got {limit}")


class NothingToClaimError(StateError):
    def __init__(self) -> None:
        super().__init__(4006, "Nothing to claim")


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
