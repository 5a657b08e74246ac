"""
Shared fixtures for the market test suite.

Environment variables are set before any ``app`` import so Settings picks
up a SQLite store, inline team creation, eager Celery tasks and disabled
rate limits.

The in-memory fakes implement the domain ports with copy-on-enter
transactions: a unit of work edits a private copy of the store and only
``commit()`` publishes it, so a failed use case leaves no trace.
"""

import copy
import os
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID, uuid4

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("REDIS_URL", "redis://127.0.0.1:1/0")
os.environ.setdefault("TEAM_CREATION_MODE", "inline")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("CELERY_TASK_ALWAYS_EAGER", "true")

import pytest

from app.domain.market.entities import (
    ListingOwnership,
    ListingView,
    Player,
    PlayerOwnership,
    PlayerPosition,
    Team,
    TransferHistory,
    TransferListing,
    User,
)
from app.domain.market.errors import (
    AuthenticationError,
    EmailAlreadyRegisteredError,
    PlayerAlreadyListedError,
)
from app.domain.market.ports import (
    ListingCache,
    ListingFilters,
    ListingRepository,
    MarketUnitOfWork,
    PasswordHasher,
    PlayerRepository,
    TeamCreationQueue,
    TeamRepository,
    TokenIssuer,
    TransferHistoryRepository,
    UserRepository,
)
from app.domain.market.roster_generator import PlayerDraft
from app.domain.market.rules import team_lock_order
from app.infrastructure.market.database import build_engine, build_session_factory, create_schema

BASE_TIME = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


# ══════════════════════════════════════════════════════════════════════
# In-memory store
# ══════════════════════════════════════════════════════════════════════


@dataclass
class StoreState:
    users: dict[UUID, User] = field(default_factory=dict)
    teams: dict[UUID, Team] = field(default_factory=dict)
    players: dict[UUID, Player] = field(default_factory=dict)
    listings: dict[UUID, TransferListing] = field(default_factory=dict)
    history: list[TransferHistory] = field(default_factory=list)


class InMemoryStore:
    """Committed state plus helpers to seed it directly."""

    def __init__(self) -> None:
        self.state = StoreState()
        self._clock = BASE_TIME

    def tick(self) -> datetime:
        self._clock += timedelta(seconds=1)
        return self._clock

    def add_user(self, email: str = "manager@example.com", password_hash: str = "hashed:secret") -> User:
        user = User(id=uuid4(), email=email, password_hash=password_hash, created_at=self.tick())
        self.state.users[user.id] = user
        return user

    def add_team(
        self,
        email: str = "manager@example.com",
        players: int = 20,
        budget: int = 5_000_000,
    ) -> tuple[User, Team, list[Player]]:
        user = self.add_user(email)
        team = Team(id=uuid4(), user_id=user.id, budget=budget)
        self.state.teams[team.id] = team
        roster = [self.add_player(team.id, f"Player {i}") for i in range(players)]
        return user, team, roster

    def add_player(
        self, team_id: UUID, name: str, position: PlayerPosition = PlayerPosition.MID
    ) -> Player:
        player = Player(id=uuid4(), team_id=team_id, name=name, position=position, created_at=self.tick())
        self.state.players[player.id] = player
        return player

    def add_listing(self, player_id: UUID, asking_price: int) -> TransferListing:
        listing = TransferListing(
            id=uuid4(), player_id=player_id, asking_price=asking_price, created_at=self.tick()
        )
        self.state.listings[listing.id] = listing
        return listing

    def roster_size(self, team_id: UUID) -> int:
        return sum(1 for p in self.state.players.values() if p.team_id == team_id)


class _Repo:
    def __init__(self, uow: "InMemoryUnitOfWork") -> None:
        self._uow = uow

    @property
    def _state(self) -> StoreState:
        return self._uow.working


class FakeListingRepository(_Repo, ListingRepository):
    def get_for_update(self, listing_id: UUID) -> Optional[ListingOwnership]:
        listing = self._state.listings.get(listing_id)
        if listing is None:
            return None
        self._uow.lock_log.append(("listing", listing_id))
        player = copy.copy(self._state.players[listing.player_id])
        self._uow.lock_log.append(("player", player.id))
        team = self._state.teams.get(player.team_id)
        return ListingOwnership(
            listing=listing,
            player=player,
            seller_team_id=team.id if team else None,
            seller_user_id=team.user_id if team else None,
        )

    def find_by_player(self, player_id: UUID) -> Optional[TransferListing]:
        for listing in self._state.listings.values():
            if listing.player_id == player_id:
                return listing
        return None

    def add(self, player_id: UUID, asking_price: int) -> TransferListing:
        if self.find_by_player(player_id) is not None:
            raise PlayerAlreadyListedError(player_id)
        listing = TransferListing(
            id=uuid4(),
            player_id=player_id,
            asking_price=asking_price,
            created_at=self._uow.store.tick(),
        )
        self._state.listings[listing.id] = listing
        return listing

    def delete(self, listing_id: UUID) -> None:
        self._state.listings.pop(listing_id, None)

    def search(
        self, filters: ListingFilters, limit: int, offset: int
    ) -> tuple[list[ListingView], int]:
        views = []
        for listing in self._state.listings.values():
            player = self._state.players[listing.player_id]
            if filters.player_name and filters.player_name.lower() not in player.name.lower():
                continue
            if filters.team_id is not None and player.team_id != filters.team_id:
                continue
            if filters.min_price is not None and listing.asking_price < filters.min_price:
                continue
            if filters.max_price is not None and listing.asking_price > filters.max_price:
                continue
            views.append(
                ListingView(
                    id=listing.id,
                    asking_price=listing.asking_price,
                    created_at=listing.created_at,
                    player_id=player.id,
                    player_name=player.name,
                    player_position=player.position,
                    team_id=player.team_id,
                )
            )
        views.sort(key=lambda v: (v.created_at, v.id.hex), reverse=True)
        return views[offset : offset + limit], len(views)


class FakePlayerRepository(_Repo, PlayerRepository):
    def get_with_owner(self, player_id: UUID, for_update: bool = False) -> Optional[PlayerOwnership]:
        player = self._state.players.get(player_id)
        if player is None:
            return None
        if for_update:
            self._uow.lock_log.append(("player", player_id))
        team = self._state.teams.get(player.team_id)
        return PlayerOwnership(player=copy.copy(player), owner_user_id=team.user_id if team else None)

    def list_by_team(self, team_id: UUID) -> list[Player]:
        return [copy.copy(p) for p in self._state.players.values() if p.team_id == team_id]

    def count_by_team(self, team_id: UUID) -> int:
        return sum(1 for p in self._state.players.values() if p.team_id == team_id)

    def add_squad(self, team_id: UUID, drafts: list[PlayerDraft]) -> list[Player]:
        created = []
        for draft in drafts:
            player = Player(
                id=uuid4(),
                team_id=team_id,
                name=draft.name,
                position=draft.position,
                created_at=self._uow.store.tick(),
            )
            self._state.players[player.id] = player
            created.append(copy.copy(player))
        return created

    def save(self, player: Player) -> None:
        self._state.players[player.id] = copy.copy(player)


class FakeTeamRepository(_Repo, TeamRepository):
    def get(self, team_id: UUID) -> Optional[Team]:
        team = self._state.teams.get(team_id)
        return copy.copy(team) if team else None

    def get_by_user(self, user_id: UUID) -> Optional[Team]:
        for team in self._state.teams.values():
            if team.user_id == user_id:
                return copy.copy(team)
        return None

    def lock_in_order(self, team_ids: list[UUID]) -> dict[UUID, Team]:
        locked = {}
        for team_id in team_lock_order(*team_ids):
            self._uow.lock_log.append(("team", team_id))
            team = self._state.teams.get(team_id)
            if team is not None:
                locked[team_id] = copy.copy(team)
        return locked

    def add(self, user_id: UUID, budget: int) -> Team:
        team = Team(id=uuid4(), user_id=user_id, budget=budget)
        self._state.teams[team.id] = team
        return copy.copy(team)

    def save(self, team: Team) -> None:
        self._state.teams[team.id] = copy.copy(team)


class FakeUserRepository(_Repo, UserRepository):
    def get(self, user_id: UUID, for_update: bool = False) -> Optional[User]:
        user = self._state.users.get(user_id)
        if user is None:
            return None
        team = next((t for t in self._state.teams.values() if t.user_id == user_id), None)
        return replace(user, team_id=team.id if team else None)

    def get_by_email(self, email: str) -> Optional[User]:
        for user in self._state.users.values():
            if user.email == email.lower():
                return user
        return None

    def add(self, email: str, password_hash: str) -> User:
        if any(u.email == email.lower() for u in self._state.users.values()):
            raise EmailAlreadyRegisteredError(email.lower())
        user = User(
            id=uuid4(),
            email=email.lower(),
            password_hash=password_hash,
            created_at=self._uow.store.tick(),
        )
        self._state.users[user.id] = user
        return user


class FakeHistoryRepository(_Repo, TransferHistoryRepository):
    def append(
        self, player_id: UUID, from_team_id: UUID, to_team_id: UUID, price: int
    ) -> TransferHistory:
        record = TransferHistory(
            id=uuid4(),
            player_id=player_id,
            from_team_id=from_team_id,
            to_team_id=to_team_id,
            price=price,
            transferred_at=self._uow.store.tick(),
        )
        self._state.history.append(record)
        return record


class InMemoryUnitOfWork(MarketUnitOfWork):
    """Copy-on-enter unit of work over an InMemoryStore."""

    def __init__(self, store: InMemoryStore) -> None:
        self.store = store
        self.working: Optional[StoreState] = None
        self.commits = 0
        self.lock_log: list[tuple[str, UUID]] = []
        self.listings = FakeListingRepository(self)
        self.players = FakePlayerRepository(self)
        self.teams = FakeTeamRepository(self)
        self.users = FakeUserRepository(self)
        self.history = FakeHistoryRepository(self)

    def __enter__(self) -> "InMemoryUnitOfWork":
        self.working = copy.deepcopy(self.store.state)
        return self

    def commit(self) -> None:
        self.store.state = self.working
        self.working = copy.deepcopy(self.store.state)
        self.commits += 1

    def rollback(self) -> None:
        self.working = None


# ══════════════════════════════════════════════════════════════════════
# Other port fakes
# ══════════════════════════════════════════════════════════════════════


class FakeListingCache(ListingCache):
    def __init__(self) -> None:
        self.entries: dict[str, dict] = {}
        self.gets = 0
        self.sets = 0
        self.invalidations = 0
        self.current_generation = 0

    def get(self, key: str) -> Optional[dict]:
        self.gets += 1
        value = self.entries.get(key)
        return copy.deepcopy(value) if value is not None else None

    def set(self, key: str, value: dict) -> None:
        self.sets += 1
        self.entries[key] = copy.deepcopy(value)

    def generation(self) -> Optional[int]:
        return self.current_generation

    def invalidate_all(self) -> int:
        self.invalidations += 1
        self.current_generation += 1
        removed = len(self.entries)
        self.entries.clear()
        return removed


class BrokenListingCache(ListingCache):
    """A cache whose invalidation always fails."""

    def get(self, key: str) -> Optional[dict]:
        return None

    def set(self, key: str, value: dict) -> None:
        return None

    def generation(self) -> Optional[int]:
        return 0

    def invalidate_all(self) -> int:
        raise ConnectionError("cache unreachable")


class FakePasswordHasher(PasswordHasher):
    def hash(self, password: str) -> str:
        return f"hashed:{password}"

    def verify(self, password: str, password_hash: str) -> bool:
        return password_hash == f"hashed:{password}"


class FakeTokenIssuer(TokenIssuer):
    def issue(self, user_id: UUID) -> str:
        return f"token-{user_id}"

    def verify(self, token: str) -> UUID:
        if not token.startswith("token-"):
            raise AuthenticationError("Invalid token")
        try:
            return UUID(token.removeprefix("token-"))
        except ValueError as exc:
            raise AuthenticationError("Invalid token") from exc


class RecordingTeamQueue(TeamCreationQueue):
    def __init__(self) -> None:
        self.enqueued: list[UUID] = []

    def enqueue(self, user_id: UUID) -> None:
        self.enqueued.append(user_id)


# ══════════════════════════════════════════════════════════════════════
# Fixtures
# ══════════════════════════════════════════════════════════════════════


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def uow(store: InMemoryStore) -> InMemoryUnitOfWork:
    return InMemoryUnitOfWork(store)


@pytest.fixture
def cache() -> FakeListingCache:
    return FakeListingCache()


@pytest.fixture
def broken_cache() -> BrokenListingCache:
    return BrokenListingCache()


@pytest.fixture
def hasher() -> FakePasswordHasher:
    return FakePasswordHasher()


@pytest.fixture
def tokens() -> FakeTokenIssuer:
    return FakeTokenIssuer()


@pytest.fixture
def team_queue() -> RecordingTeamQueue:
    return RecordingTeamQueue()


@pytest.fixture
def uow_factory(store: InMemoryStore):
    """Build a fresh unit of work over the shared store (one per request)."""
    return lambda: InMemoryUnitOfWork(store)


@pytest.fixture
def session_factory(tmp_path):
    """SQLite file store with the full schema, disposed after the test."""
    engine = build_engine(f"sqlite:///{tmp_path / 'market.db'}", lock_timeout_ms=10_000)
    create_schema(engine)
    yield build_session_factory(engine)
    engine.dispose()
