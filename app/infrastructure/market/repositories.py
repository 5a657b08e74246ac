"""
Adapter: SQLAlchemy repositories for the market context.

Implements the repository ports on top of one ORM Session owned by the
unit of work. Locking reads use ``with_for_update`` together with
``populate_existing`` so a row already in the identity map is refreshed
with the values visible once the lock is held.
"""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

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
from app.domain.market.errors import EmailAlreadyRegisteredError, PlayerAlreadyListedError
from app.domain.market.ports import (
    ListingFilters,
    ListingRepository,
    PlayerRepository,
    TeamRepository,
    TransferHistoryRepository,
    UserRepository,
)
from app.domain.market.roster_generator import PlayerDraft
from app.domain.market.rules import team_lock_order
from app.infrastructure.market.models import (
    PlayerRow,
    TeamRow,
    TransferHistoryRow,
    TransferListingRow,
    UserRow,
    _utcnow,
)

logger = logging.getLogger(__name__)


def _to_player(row: PlayerRow) -> Player:
    return Player(
        id=row.id,
        team_id=row.team_id,
        name=row.name,
        position=row.position,
        created_at=row.created_at,
    )


def _to_team(row: TeamRow) -> Team:
    return Team(id=row.id, user_id=row.user_id, budget=row.budget)


def _to_listing(row: TransferListingRow) -> TransferListing:
    return TransferListing(
        id=row.id,
        player_id=row.player_id,
        asking_price=row.asking_price,
        created_at=row.created_at,
    )


def _to_user(row: UserRow) -> User:
    return User(
        id=row.id,
        email=row.email,
        password_hash=row.password_hash,
        created_at=row.created_at,
    )


def _escape_like(value: str) -> str:
    """Escape LIKE wildcards so user input matches literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class SqlAlchemyListingRepository(ListingRepository):
    """Transfer listings backed by the transfer_listings table."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_for_update(self, listing_id: UUID) -> Optional[ListingOwnership]:
        """Lock the listing and its player row and resolve the seller.

        On PostgreSQL a listing deleted by a transaction that committed
        while we waited is skipped, so the caller sees None.
        """
        stmt = (
            select(TransferListingRow, PlayerRow, TeamRow.id, TeamRow.user_id)
            .join(PlayerRow, TransferListingRow.player_id == PlayerRow.id)
            .outerjoin(TeamRow, PlayerRow.team_id == TeamRow.id)
            .where(TransferListingRow.id == listing_id)
            .with_for_update(of=[TransferListingRow, PlayerRow])
            .execution_options(populate_existing=True)
        )
        row = self._session.execute(stmt).one_or_none()
        if row is None:
            return None

        listing_row, player_row, team_id, user_id = row
        return ListingOwnership(
            listing=_to_listing(listing_row),
            player=_to_player(player_row),
            seller_team_id=team_id,
            seller_user_id=user_id,
        )

    def find_by_player(self, player_id: UUID) -> Optional[TransferListing]:
        row = self._session.execute(
            select(TransferListingRow).where(TransferListingRow.player_id == player_id)
        ).scalar_one_or_none()
        return _to_listing(row) if row is not None else None

    def add(self, player_id: UUID, asking_price: int) -> TransferListing:
        row = TransferListingRow(
            player_id=player_id, asking_price=asking_price, created_at=_utcnow()
        )
        self._session.add(row)
        try:
            self._session.flush()
        except IntegrityError as exc:
            # A concurrent insert won the unique(player_id) race.
            raise PlayerAlreadyListedError(player_id) from exc
        return _to_listing(row)

    def delete(self, listing_id: UUID) -> None:
        row = self._session.get(TransferListingRow, listing_id)
        if row is not None:
            self._session.delete(row)
            self._session.flush()

    def search(
        self, filters: ListingFilters, limit: int, offset: int
    ) -> tuple[list[ListingView], int]:
        """Return one page of listings, newest first, and the total count."""
        conditions = []
        if filters.player_name:
            pattern = f"%{_escape_like(filters.player_name.lower())}%"
            conditions.append(func.lower(PlayerRow.name).like(pattern, escape="\\"))
        if filters.team_id is not None:
            conditions.append(PlayerRow.team_id == filters.team_id)
        if filters.min_price is not None:
            conditions.append(TransferListingRow.asking_price >= filters.min_price)
        if filters.max_price is not None:
            conditions.append(TransferListingRow.asking_price <= filters.max_price)

        page_stmt: Select = (
            select(TransferListingRow, PlayerRow)
            .join(PlayerRow, TransferListingRow.player_id == PlayerRow.id)
            .where(*conditions)
            .order_by(TransferListingRow.created_at.desc(), TransferListingRow.id.desc())
            .limit(limit)
            .offset(offset)
        )
        count_stmt = (
            select(func.count())
            .select_from(TransferListingRow)
            .join(PlayerRow, TransferListingRow.player_id == PlayerRow.id)
            .where(*conditions)
        )

        rows = self._session.execute(page_stmt).all()
        total = self._session.execute(count_stmt).scalar_one()

        views = [
            ListingView(
                id=listing.id,
                asking_price=listing.asking_price,
                created_at=listing.created_at,
                player_id=player.id,
                player_name=player.name,
                player_position=player.position,
                team_id=player.team_id,
            )
            for listing, player in rows
        ]
        return views, total


class SqlAlchemyPlayerRepository(PlayerRepository):
    """Players backed by the players table."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_with_owner(
        self, player_id: UUID, for_update: bool = False
    ) -> Optional[PlayerOwnership]:
        stmt = (
            select(PlayerRow, TeamRow.user_id)
            .outerjoin(TeamRow, PlayerRow.team_id == TeamRow.id)
            .where(PlayerRow.id == player_id)
        )
        if for_update:
            # Only the player row; team rows are locked later in id order.
            stmt = stmt.with_for_update(of=PlayerRow).execution_options(
                populate_existing=True
            )
        row = self._session.execute(stmt).one_or_none()
        if row is None:
            return None
        player_row, owner_user_id = row
        return PlayerOwnership(player=_to_player(player_row), owner_user_id=owner_user_id)

    def list_by_team(self, team_id: UUID) -> list[Player]:
        rows = self._session.execute(
            select(PlayerRow)
            .where(PlayerRow.team_id == team_id)
            .order_by(PlayerRow.created_at, PlayerRow.id)
        ).scalars()
        return [_to_player(row) for row in rows]

    def count_by_team(self, team_id: UUID) -> int:
        return self._session.execute(
            select(func.count()).select_from(PlayerRow).where(PlayerRow.team_id == team_id)
        ).scalar_one()

    def add_squad(self, team_id: UUID, drafts: list[PlayerDraft]) -> list[Player]:
        rows = [
            PlayerRow(team_id=team_id, name=d.name, position=d.position, created_at=_utcnow())
            for d in drafts
        ]
        self._session.add_all(rows)
        self._session.flush()
        return [_to_player(row) for row in rows]

    def save(self, player: Player) -> None:
        row = self._session.get(PlayerRow, player.id)
        if row is None:
            raise LookupError(f"Player row vanished: {player.id}")
        row.name = player.name
        row.position = player.position
        row.team_id = player.team_id
        self._session.flush()


class SqlAlchemyTeamRepository(TeamRepository):
    """Teams backed by the teams table."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, team_id: UUID) -> Optional[Team]:
        row = self._session.get(TeamRow, team_id)
        return _to_team(row) if row is not None else None

    def get_by_user(self, user_id: UUID) -> Optional[Team]:
        row = self._session.execute(
            select(TeamRow).where(TeamRow.user_id == user_id)
        ).scalar_one_or_none()
        return _to_team(row) if row is not None else None

    def lock_in_order(self, team_ids: list[UUID]) -> dict[UUID, Team]:
        """Lock each team row, one statement per row, in global lock order."""
        locked: dict[UUID, Team] = {}
        for team_id in team_lock_order(*team_ids):
            row = self._session.execute(
                select(TeamRow)
                .where(TeamRow.id == team_id)
                .with_for_update()
                .execution_options(populate_existing=True)
            ).scalar_one_or_none()
            if row is not None:
                locked[team_id] = _to_team(row)
        return locked

    def add(self, user_id: UUID, budget: int) -> Team:
        row = TeamRow(user_id=user_id, budget=budget)
        self._session.add(row)
        self._session.flush()
        return _to_team(row)

    def save(self, team: Team) -> None:
        row = self._session.get(TeamRow, team.id)
        if row is None:
            raise LookupError(f"Team row vanished: {team.id}")
        row.budget = team.budget
        self._session.flush()


class SqlAlchemyUserRepository(UserRepository):
    """Users backed by the users table."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, user_id: UUID, for_update: bool = False) -> Optional[User]:
        stmt = select(UserRow).where(UserRow.id == user_id)
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        row = self._session.execute(stmt).scalar_one_or_none()
        return _to_user(row) if row is not None else None

    def get_by_email(self, email: str) -> Optional[User]:
        row = self._session.execute(
            select(UserRow).where(UserRow.email == email.lower())
        ).scalar_one_or_none()
        return _to_user(row) if row is not None else None

    def add(self, email: str, password_hash: str) -> User:
        row = UserRow(email=email.lower(), password_hash=password_hash, created_at=_utcnow())
        self._session.add(row)
        try:
            self._session.flush()
        except IntegrityError as exc:
            # A concurrent registration won the unique(email) race.
            raise EmailAlreadyRegisteredError(email.lower()) from exc
        return _to_user(row)


class SqlAlchemyTransferHistoryRepository(TransferHistoryRepository):
    """Append-only trade ledger backed by the transfer_history table."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def append(
        self, player_id: UUID, from_team_id: UUID, to_team_id: UUID, price: int
    ) -> TransferHistory:
        row = TransferHistoryRow(
            player_id=player_id,
            from_team_id=from_team_id,
            to_team_id=to_team_id,
            price=price,
            transferred_at=_utcnow(),
        )
        self._session.add(row)
        self._session.flush()
        logger.debug("Appended transfer history %s.", row.id)
        return TransferHistory(
            id=row.id,
            player_id=row.player_id,
            from_team_id=row.from_team_id,
            to_team_id=row.to_team_id,
            price=row.price,
            transferred_at=row.transferred_at,
        )
