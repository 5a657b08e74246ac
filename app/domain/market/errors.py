"""
Domain-specific errors for the market bounded context.

All errors raised from the domain and application layers are defined here.
They are mapped to HTTP responses at the interface layer.
No framework imports allowed.

Families:
    NotFoundError     : an entity is missing (player, listing, team, user).
    ForbiddenError    : caller does not own the entity.
    ConflictError     : duplicate active listing.
    BadRequestError   : business invariant violation.
    AuthenticationError: bad credentials or token.
    StoreContentionError: lock wait / deadlock; the only retryable family.
"""

from uuid import UUID


class MarketDomainError(Exception):
    """Base error for all market domain errors."""

    code = "market_error"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)


# ------------------------------------------------------------------
# Not found
# ------------------------------------------------------------------


class NotFoundError(MarketDomainError):
    """Raised when a referenced entity does not exist."""

    code = "not_found"

    def __init__(self, entity: str, entity_id: UUID | str) -> None:
        super().__init__(f"{entity} not found: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class PlayerNotFoundError(NotFoundError):
    def __init__(self, player_id: UUID) -> None:
        super().__init__("Player", player_id)


class ListingNotFoundError(NotFoundError):
    def __init__(self, listing_id: UUID) -> None:
        super().__init__("Listing", listing_id)


class TeamNotFoundError(NotFoundError):
    def __init__(self, team_id: UUID | str) -> None:
        super().__init__("Team", team_id)


class UserNotFoundError(NotFoundError):
    def __init__(self, user_id: UUID) -> None:
        super().__init__("User", user_id)


# ------------------------------------------------------------------
# Forbidden / conflict
# ------------------------------------------------------------------


class ForbiddenError(MarketDomainError):
    """Raised when the caller does not own the entity it acts on."""

    code = "forbidden"


class NotOwnerError(ForbiddenError):
    def __init__(self, entity: str) -> None:
        super().__init__(f"You do not own this {entity.lower()}")
        self.entity = entity


class ConflictError(MarketDomainError):
    """Raised when an operation would duplicate a unique resource."""

    code = "conflict"


class PlayerAlreadyListedError(ConflictError):
    def __init__(self, player_id: UUID) -> None:
        super().__init__(f"Player already listed: {player_id}")
        self.player_id = player_id


class EmailAlreadyRegisteredError(ConflictError):
    def __init__(self, email: str) -> None:
        super().__init__("Email already registered")
        self.email = email


# ------------------------------------------------------------------
# Bad request (business invariants)
# ------------------------------------------------------------------


class BadRequestError(MarketDomainError):
    """Raised when a request violates a business invariant."""

    code = "bad_request"


class SelfPurchaseError(BadRequestError):
    def __init__(self) -> None:
        super().__init__("Cannot buy your own player")


class MissingTeamError(BadRequestError):
    def __init__(self, role: str) -> None:
        super().__init__(f"{role} has no team")
        self.role = role


class OrphanPlayerError(BadRequestError):
    def __init__(self, player_id: UUID) -> None:
        super().__init__(f"Player does not belong to a valid team: {player_id}")
        self.player_id = player_id


class RosterLimitError(BadRequestError):
    """Raised when a trade would push a roster outside its bounds."""

    def __init__(self, side: str, limit: int) -> None:
        if side == "seller":
            message = f"Seller team would fall below minimum players ({limit})"
        else:
            message = f"Buyer team would exceed maximum players ({limit})"
        super().__init__(message)
        self.side = side
        self.limit = limit


class InsufficientFundsError(BadRequestError):
    """Raised when the buying team lacks the budget for a purchase."""

    def __init__(self, required: int, available: int) -> None:
        super().__init__(
            f"Insufficient funds: required {required}, available {available}"
        )
        self.required = required
        self.available = available


# ------------------------------------------------------------------
# Identity
# ------------------------------------------------------------------


class AuthenticationError(MarketDomainError):
    """Raised when credentials or a bearer token are not valid."""

    code = "unauthorized"


class InvalidCredentialsError(AuthenticationError):
    def __init__(self) -> None:
        super().__init__("Invalid credentials")


# ------------------------------------------------------------------
# Store
# ------------------------------------------------------------------


class StoreContentionError(MarketDomainError):
    """Raised when the store gives up waiting on a row lock.

    Covers lock-wait timeouts, deadlock victims and serialization
    failures. The attempt had no effect and may be retried.
    """

    code = "store_contention"

    def __init__(self, reason: str) -> None:
        super().__init__(f"Store contention: {reason}")
        self.reason = reason
