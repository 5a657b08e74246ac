"""
Port interfaces (ABCs) for the market bounded context.

Ports define the contracts that the domain requires from the outside world.
Infrastructure adapters implement these interfaces.
The domain layer never depends on concrete implementations.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional
from uuid import UUID

from app.domain.market.entities import (
    ListingOwnership,
    ListingView,
    Player,
    PlayerOwnership,
    Team,
    TransferHistory,
    TransferListing,
    User,
)
from app.domain.market.roster_generator import PlayerDraft


@dataclass(frozen=True)
class ListingFilters:
    """Optional filters for browsing listings. None means "any"."""

    player_name: Optional[str] = None
    team_id: Optional[UUID] = None
    min_price: Optional[int] = None
    max_price: Optional[int] = None


class ListingRepository(ABC):
    """Port for transfer listing rows."""

    @abstractmethod
    def get_for_update(self, listing_id: UUID) -> Optional[ListingOwnership]:
        """Return the listing with its player and seller, locking listing and player rows.

        Returns None if the listing does not exist (or was deleted by a
        transaction that committed while this one waited on the lock).
        """
        raise NotImplementedError

    @abstractmethod
    def find_by_player(self, player_id: UUID) -> Optional[TransferListing]:
        """Return the active listing for a player, if any."""
        raise NotImplementedError

    @abstractmethod
    def add(self, player_id: UUID, asking_price: int) -> TransferListing:
        """Insert a listing.

        Raises:
            PlayerAlreadyListedError: If the player already has a listing.
        """
        raise NotImplementedError

    @abstractmethod
    def delete(self, listing_id: UUID) -> None:
        """Delete a listing. Deleting a missing listing is a no-op."""
        raise NotImplementedError

    @abstractmethod
    def search(
        self, filters: ListingFilters, limit: int, offset: int
    ) -> tuple[list[ListingView], int]:
        """Return one page of listings, newest first, and the total match count."""
        raise NotImplementedError


class PlayerRepository(ABC):
    """Port for player rows."""

    @abstractmethod
    def get_with_owner(
        self, player_id: UUID, for_update: bool = False
    ) -> Optional[PlayerOwnership]:
        """Return a player together with the user owning its team.

        With ``for_update`` the player row stays locked until the unit of
        work ends, so ownership cannot change under the caller.
        """
        raise NotImplementedError

    @abstractmethod
    def list_by_team(self, team_id: UUID) -> list[Player]:
        """Return all players of a team."""
        raise NotImplementedError

    @abstractmethod
    def count_by_team(self, team_id: UUID) -> int:
        """Return the roster size of a team."""
        raise NotImplementedError

    @abstractmethod
    def add_squad(self, team_id: UUID, drafts: list[PlayerDraft]) -> list[Player]:
        """Insert generated players for a team."""
        raise NotImplementedError

    @abstractmethod
    def save(self, player: Player) -> None:
        """Persist name, position and team of an existing player."""
        raise NotImplementedError


class TeamRepository(ABC):
    """Port for team rows."""

    @abstractmethod
    def get(self, team_id: UUID) -> Optional[Team]:
        """Return a team by id."""
        raise NotImplementedError

    @abstractmethod
    def get_by_user(self, user_id: UUID) -> Optional[Team]:
        """Return the team owned by a user, without locking."""
        raise NotImplementedError

    @abstractmethod
    def lock_in_order(self, team_ids: list[UUID]) -> dict[UUID, Team]:
        """Lock team rows exclusively and return the ones that exist.

        Implementations must acquire the locks in ``team_lock_order``.
        """
        raise NotImplementedError

    @abstractmethod
    def add(self, user_id: UUID, budget: int) -> Team:
        """Insert a team for a user."""
        raise NotImplementedError

    @abstractmethod
    def save(self, team: Team) -> None:
        """Persist the budget of an existing team."""
        raise NotImplementedError


class UserRepository(ABC):
    """Port for user rows."""

    @abstractmethod
    def get(self, user_id: UUID, for_update: bool = False) -> Optional[User]:
        """Return a user by id, optionally locking the row."""
        raise NotImplementedError

    @abstractmethod
    def get_by_email(self, email: str) -> Optional[User]:
        """Return a user by (normalized) email."""
        raise NotImplementedError

    @abstractmethod
    def add(self, email: str, password_hash: str) -> User:
        """Insert a user.

        Raises:
            EmailAlreadyRegisteredError: If the email is already taken.
        """
        raise NotImplementedError


class TransferHistoryRepository(ABC):
    """Port for the append-only trade ledger."""

    @abstractmethod
    def append(
        self, player_id: UUID, from_team_id: UUID, to_team_id: UUID, price: int
    ) -> TransferHistory:
        """Append a completed trade."""
        raise NotImplementedError


class MarketUnitOfWork(ABC):
    """Port for one atomic unit of work against the entity store.

    Usage:
        with uow:
            ...
            uow.commit()

    Leaving the block without commit() rolls everything back.
    Contention on row locks surfaces as StoreContentionError.
    """

    listings: ListingRepository
    players: PlayerRepository
    teams: TeamRepository
    users: UserRepository
    history: TransferHistoryRepository

    def __enter__(self) -> "MarketUnitOfWork":
        return self

    def __exit__(self, *args: Any) -> None:
        self.rollback()

    @abstractmethod
    def commit(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def rollback(self) -> None:
        raise NotImplementedError


class ListingCache(ABC):
    """Port for the listing page cache.

    Implementations never raise: failures degrade to a miss.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[dict]:
        """Return the cached payload for a key, or None."""
        raise NotImplementedError

    @abstractmethod
    def set(self, key: str, value: dict) -> None:
        """Cache a payload and record its key in the invalidation index."""
        raise NotImplementedError

    @abstractmethod
    def generation(self) -> Optional[int]:
        """Return the current page generation, or None if it cannot be read.

        Page keys embed the generation, so a page computed before an
        invalidation is stored under a generation no reader asks for.
        """
        raise NotImplementedError

    @abstractmethod
    def invalidate_all(self) -> int:
        """Advance the generation and drop every tracked listing page.

        Returns the number of keys removed.
        """
        raise NotImplementedError


class PasswordHasher(ABC):
    """Port for one-way credential hashing."""

    @abstractmethod
    def hash(self, password: str) -> str:
        raise NotImplementedError

    @abstractmethod
    def verify(self, password: str, password_hash: str) -> bool:
        raise NotImplementedError


class TokenIssuer(ABC):
    """Port for signing and verifying bearer tokens."""

    @abstractmethod
    def issue(self, user_id: UUID) -> str:
        """Return a signed token whose subject is the user id."""
        raise NotImplementedError

    @abstractmethod
    def verify(self, token: str) -> UUID:
        """Return the user id carried by a valid token.

        Raises:
            AuthenticationError: If the token is invalid or expired.
        """
        raise NotImplementedError


class TeamCreationQueue(ABC):
    """Port for requesting asynchronous team creation."""

    @abstractmethod
    def enqueue(self, user_id: UUID) -> None:
        """Schedule creation of the team and squad for a new user."""
        raise NotImplementedError
