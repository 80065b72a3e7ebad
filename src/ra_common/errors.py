"""Unified error codes and custom exceptions.

Error code ranges:
  6xxx: Game configuration (fatal for a finalization run)
  7xxx: Bids / participants (per-participant, non-fatal inside a batch)
  9xxx: System / integrity
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


# --- 6xxx: Configuration ---

class ConfigurationError(AppError):
    """Game setup does not allow finalization. Aborts the run immediately."""

    def __init__(self, code: int, message: str, http_status: int = 422) -> None:
        super().__init__(code, message, http_status)


class GameNotFoundError(ConfigurationError):
    def __init__(self, game_id: str) -> None:
        super().__init__(6001, f"Game not found: {game_id}", 404)


class UnsupportedGameFormatError(ConfigurationError):
    def __init__(self, game_type: str) -> None:
        super().__init__(6002, f"Game type does not support bidding: {game_type}")


class PeriodNotFoundError(ConfigurationError):
    def __init__(self, period_name: str) -> None:
        super().__init__(6003, f"Auction period not found: {period_name}", 404)


# --- 7xxx: Bids / participants ---

class ParticipantNotFoundError(AppError):
    def __init__(self, game_id: str, participant_id: str) -> None:
        super().__init__(
            7001, f"Participant {participant_id} not found in game {game_id}", 404
        )


class InvalidBidTransitionError(AppError):
    def __init__(self, bid_id: str, current: str, target: str) -> None:
        super().__init__(
            7002, f"Bid {bid_id} cannot move from {current} to {target}", 422
        )


class FinalizationInProgressError(AppError):
    def __init__(self, game_id: str) -> None:
        super().__init__(7003, f"Finalization already running for game {game_id}", 409)


class BidAlreadySettledError(AppError):
    def __init__(self, bid_id: str) -> None:
        super().__init__(7004, f"Bid {bid_id} was settled by another run", 409)


class FinalizationLockLostError(AppError):
    def __init__(self, game_id: str) -> None:
        super().__init__(7005, f"Finalize lock for game {game_id} was lost mid-run", 409)


# --- 9xxx: System ---

class CriticalIntegrityError(AppError):
    """Period list would lose entries. Never swallowed: signals possible data loss."""

    def __init__(self, detail: str) -> None:
        super().__init__(9101, f"CRITICAL: {detail}", 500)


class ConcurrentUpdateError(AppError):
    def __init__(self, game_id: str, attempts: int) -> None:
        super().__init__(
            9102,
            f"Game {game_id} changed concurrently; gave up after {attempts} attempts",
            409,
        )


class UnauthorizedError(AppError):
    def __init__(self) -> None:
        super().__init__(9003, "Invalid or missing admin token", 401)
