"""
Tests for the market application layer (use cases).

Use cases run against the in-memory store from conftest. Each test checks
orchestration and invariants: committed effects on success, no effects at
all on failure.
"""

import copy
import random
from unittest.mock import MagicMock, patch
from uuid import uuid4

import pytest

from app.application.market.buy_player import BuyPlayerUseCase
from app.application.market.catalog_cache import LISTING_PAGE_PREFIX, listing_page_key
from app.application.market.create_listing import CreateListingUseCase
from app.application.market.create_team import CreateTeamUseCase
from app.application.market.dtos import (
    BuyPlayerCommand,
    CreateListingCommand,
    CreateTeamCommand,
    GetTeamQuery,
    IdentifyCommand,
    ListListingsQuery,
    RemoveListingCommand,
    UpdatePlayerCommand,
)
from app.application.market.get_player import GetPlayerUseCase
from app.application.market.get_team import GetTeamUseCase
from app.application.market.get_team_players import GetTeamPlayersUseCase
from app.application.market.get_user import GetUserUseCase
from app.application.market.identify_user import (
    LOGGED_IN_MESSAGE,
    REGISTERED_MESSAGE,
    IdentifyUserUseCase,
)
from app.application.market.list_listings import ListListingsUseCase
from app.application.market.remove_listing import RemoveListingUseCase
from app.application.market.update_player import UpdatePlayerUseCase
from app.domain.market.entities import PlayerPosition
from app.domain.market.errors import (
    InsufficientFundsError,
    InvalidCredentialsError,
    ListingNotFoundError,
    MissingTeamError,
    NotOwnerError,
    OrphanPlayerError,
    PlayerAlreadyListedError,
    PlayerNotFoundError,
    RosterLimitError,
    SelfPurchaseError,
    TeamNotFoundError,
    UserNotFoundError,
)
from app.domain.market.roster_generator import RosterGenerator


def _snapshot(store):
    return copy.deepcopy(store.state)


# ══════════════════════════════════════════════════════════════════════
# Listing catalog
# ══════════════════════════════════════════════════════════════════════


class TestCreateListingUseCase:
    """Tests for CreateListingUseCase."""

    def test_owner_can_list_player(self, store, uow, cache) -> None:
        user, _, roster = store.add_team()
        cache.entries["transfers:list:stale"] = {"data": []}

        result = CreateListingUseCase(uow, cache).execute(
            CreateListingCommand(player_id=roster[0].id, user_id=user.id, asking_price=1000)
        )

        assert result.player_id == roster[0].id
        assert result.asking_price == 1000
        assert result.id in store.state.listings
        assert cache.entries == {}

    def test_player_row_is_locked_before_ownership_check(self, store, uow, cache) -> None:
        user, _, roster = store.add_team()
        CreateListingUseCase(uow, cache).execute(
            CreateListingCommand(player_id=roster[0].id, user_id=user.id, asking_price=1000)
        )
        assert uow.lock_log == [("player", roster[0].id)]

    def test_missing_player_raises_not_found(self, store, uow, cache) -> None:
        user, _, _ = store.add_team()
        with pytest.raises(PlayerNotFoundError):
            CreateListingUseCase(uow, cache).execute(
                CreateListingCommand(player_id=uuid4(), user_id=user.id, asking_price=1000)
            )

    def test_non_owner_is_forbidden(self, store, uow, cache) -> None:
        _, _, roster = store.add_team("seller@example.com")
        other, _, _ = store.add_team("other@example.com")

        with pytest.raises(NotOwnerError):
            CreateListingUseCase(uow, cache).execute(
                CreateListingCommand(player_id=roster[0].id, user_id=other.id, asking_price=1000)
            )
        assert store.state.listings == {}

    def test_second_listing_for_same_player_conflicts(self, store, uow, cache) -> None:
        user, _, roster = store.add_team()
        use_case = CreateListingUseCase(uow, cache)
        command = CreateListingCommand(player_id=roster[0].id, user_id=user.id, asking_price=1000)
        use_case.execute(command)

        with pytest.raises(PlayerAlreadyListedError):
            use_case.execute(command)
        assert len(store.state.listings) == 1

    def test_seller_at_minimum_roster_can_still_list(self, store, uow, cache) -> None:
        """Roster bounds are only enforced when the purchase happens."""
        user, _, roster = store.add_team(players=15)
        result = CreateListingUseCase(uow, cache).execute(
            CreateListingCommand(player_id=roster[0].id, user_id=user.id, asking_price=500)
        )
        assert result.id in store.state.listings

    def test_cache_failure_does_not_fail_the_mutation(self, store, uow, broken_cache) -> None:
        user, _, roster = store.add_team()
        result = CreateListingUseCase(uow, broken_cache).execute(
            CreateListingCommand(player_id=roster[0].id, user_id=user.id, asking_price=1000)
        )
        assert result.id in store.state.listings


class TestRemoveListingUseCase:
    """Tests for RemoveListingUseCase."""

    def test_owner_removes_listing(self, store, uow, cache) -> None:
        user, _, roster = store.add_team()
        listing = store.add_listing(roster[0].id, 1000)
        cache.entries["transfers:list:x"] = {}

        result = RemoveListingUseCase(uow, cache).execute(
            RemoveListingCommand(listing_id=listing.id, user_id=user.id)
        )

        assert result.success is True
        assert listing.id not in store.state.listings
        assert cache.invalidations == 1

    def test_missing_listing_raises_not_found(self, store, uow, cache) -> None:
        user, _, _ = store.add_team()
        with pytest.raises(ListingNotFoundError):
            RemoveListingUseCase(uow, cache).execute(
                RemoveListingCommand(listing_id=uuid4(), user_id=user.id)
            )

    def test_non_owner_is_forbidden(self, store, uow, cache) -> None:
        _, _, roster = store.add_team("seller@example.com")
        other, _, _ = store.add_team("other@example.com")
        listing = store.add_listing(roster[0].id, 1000)

        with pytest.raises(NotOwnerError):
            RemoveListingUseCase(uow, cache).execute(
                RemoveListingCommand(listing_id=listing.id, user_id=other.id)
            )
        assert listing.id in store.state.listings


class TestListListingsUseCase:
    """Tests for ListListingsUseCase."""

    @pytest.fixture
    def catalog(self, store):
        _, team_a, roster_a = store.add_team("a@example.com")
        _, team_b, roster_b = store.add_team("b@example.com")
        roster_a[0].name = "Leo Santos"
        roster_b[0].name = "Mark Lopez"
        roster_b[1].name = "Leonard Brown"
        listings = [
            store.add_listing(roster_a[0].id, 1000),
            store.add_listing(roster_b[0].id, 5000),
            store.add_listing(roster_b[1].id, 250),
        ]
        return team_a, team_b, listings

    def test_newest_first_with_pagination_meta(self, uow, cache, catalog) -> None:
        _, _, listings = catalog
        page = ListListingsUseCase(uow, cache).execute(ListListingsQuery())

        assert [item.id for item in page.data] == [l.id for l in reversed(listings)]
        assert page.pagination.limit == 20
        assert page.pagination.offset == 0
        assert page.pagination.total == 3
        assert page.pagination.has_more is False

    def test_has_more_when_page_is_partial(self, uow, cache, catalog) -> None:
        page = ListListingsUseCase(uow, cache).execute(ListListingsQuery(limit=2))
        assert len(page.data) == 2
        assert page.pagination.has_more is True

        last = ListListingsUseCase(uow, cache).execute(ListListingsQuery(limit=2, offset=2))
        assert len(last.data) == 1
        assert last.pagination.has_more is False

    def test_limit_and_offset_are_clamped(self, uow, cache, catalog) -> None:
        page = ListListingsUseCase(uow, cache).execute(ListListingsQuery(limit=1000, offset=-4))
        assert page.pagination.limit == 100
        assert page.pagination.offset == 0

        page = ListListingsUseCase(uow, cache).execute(ListListingsQuery(limit=0))
        assert page.pagination.limit == 1

    def test_name_filter_is_case_insensitive_substring(self, uow, cache, catalog) -> None:
        page = ListListingsUseCase(uow, cache).execute(ListListingsQuery(player_name="LEO"))
        assert sorted(item.player.name for item in page.data) == ["Leo Santos", "Leonard Brown"]
        assert page.filters["player_name"] == "LEO"

    def test_name_filter_keeps_whitespace(self, uow, cache, catalog) -> None:
        page = ListListingsUseCase(uow, cache).execute(ListListingsQuery(player_name=" santos"))
        assert [item.player.name for item in page.data] == ["Leo Santos"]
        assert page.filters["player_name"] == " santos"

        page = ListListingsUseCase(uow, cache).execute(ListListingsQuery(player_name="  leo "))
        assert page.data == []

    def test_empty_name_filter_is_ignored(self, uow, cache, catalog) -> None:
        page = ListListingsUseCase(uow, cache).execute(ListListingsQuery(player_name=""))
        assert page.filters["player_name"] is None
        assert page.pagination.total == 3

    def test_team_and_price_filters(self, uow, cache, catalog) -> None:
        _, team_b, _ = catalog
        page = ListListingsUseCase(uow, cache).execute(
            ListListingsQuery(team_id=team_b.id, min_price=300, max_price=6000)
        )
        assert [item.asking_price for item in page.data] == [5000]
        assert page.filters["team_id"] == str(team_b.id)

    def test_second_identical_query_is_served_from_cache(self, store, uow, cache, catalog) -> None:
        use_case = ListListingsUseCase(uow, cache)
        first = use_case.execute(ListListingsQuery(limit=5))
        assert cache.sets == 1

        # A listing added behind the cache's back is invisible until invalidation.
        _, _, roster = store.add_team("c@example.com")
        store.add_listing(roster[0].id, 42)

        second = use_case.execute(ListListingsQuery(limit=5))
        assert second == first
        assert cache.sets == 1

    def test_page_read_before_a_mutation_is_not_served_after_it(
        self, store, uow, cache, catalog
    ) -> None:
        _, _, roster = store.add_team("c@example.com")
        use_case = ListListingsUseCase(uow, cache)
        real_search = uow.listings.search

        def search_then_mutate(*args):
            result = real_search(*args)
            # A listing is committed and the cache invalidated after the read.
            store.add_listing(roster[0].id, 42)
            cache.invalidate_all()
            return result

        with patch.object(uow.listings, "search", side_effect=search_then_mutate):
            stale = use_case.execute(ListListingsQuery())
        assert stale.pagination.total == 3

        fresh = use_case.execute(ListListingsQuery())
        assert fresh.pagination.total == 4
        assert cache.sets == 2

    def test_unreadable_generation_bypasses_the_cache(self, uow, cache, catalog) -> None:
        cache.generation = MagicMock(return_value=None)
        use_case = ListListingsUseCase(uow, cache)

        use_case.execute(ListListingsQuery())
        page = use_case.execute(ListListingsQuery())

        assert page.pagination.total == 3
        assert cache.gets == 0
        assert cache.sets == 0

    def test_cache_keys_carry_the_generation(self) -> None:
        filters = {"limit": 20, "offset": 0}
        assert listing_page_key(filters, 1) != listing_page_key(filters, 2)
        assert listing_page_key(filters, 3).startswith(f"{LISTING_PAGE_PREFIX}3:")

    def test_cache_keys_are_prefixed_and_order_independent(self) -> None:
        a = listing_page_key({"limit": 20, "offset": 0, "player_name": None})
        b = listing_page_key({"player_name": None, "offset": 0, "limit": 20})
        assert a == b
        assert a.startswith(LISTING_PAGE_PREFIX)


# ══════════════════════════════════════════════════════════════════════
# Trade executor
# ══════════════════════════════════════════════════════════════════════


@pytest.fixture
def market(store):
    """A seller with a listed player and a buyer, both with 20 players."""
    seller, seller_team, seller_roster = store.add_team("seller@example.com")
    buyer, buyer_team, _ = store.add_team("buyer@example.com")
    listing = store.add_listing(seller_roster[0].id, 1000)
    return {
        "seller": seller,
        "seller_team": seller_team,
        "buyer": buyer,
        "buyer_team": buyer_team,
        "player": seller_roster[0],
        "listing": listing,
    }


class TestBuyPlayerUseCase:
    """Tests for BuyPlayerUseCase."""

    def test_successful_purchase_moves_money_and_player(self, store, uow, cache, market) -> None:
        cache.entries["transfers:list:x"] = {}
        result = BuyPlayerUseCase(uow, cache).execute(
            BuyPlayerCommand(listing_id=market["listing"].id, buyer_user_id=market["buyer"].id)
        )

        assert result.success is True
        assert result.final_price == 950
        assert result.player_id == market["player"].id
        assert result.buyer_team_id == market["buyer_team"].id
        assert result.seller_team_id == market["seller_team"].id

        state = store.state
        assert state.teams[market["buyer_team"].id].budget == 5_000_000 - 950
        assert state.teams[market["seller_team"].id].budget == 5_000_000 + 950
        assert state.players[market["player"].id].team_id == market["buyer_team"].id
        assert market["listing"].id not in state.listings
        assert store.roster_size(market["buyer_team"].id) == 21
        assert store.roster_size(market["seller_team"].id) == 19

        assert len(state.history) == 1
        record = state.history[0]
        assert record.price == 950
        assert record.from_team_id == market["seller_team"].id
        assert record.to_team_id == market["buyer_team"].id
        assert cache.entries == {}

    def test_money_is_conserved(self, store, uow, cache, market) -> None:
        before = sum(t.budget for t in store.state.teams.values())
        BuyPlayerUseCase(uow, cache).execute(
            BuyPlayerCommand(listing_id=market["listing"].id, buyer_user_id=market["buyer"].id)
        )
        assert sum(t.budget for t in store.state.teams.values()) == before

    def test_locks_listing_then_teams_in_id_order(self, uow, cache, market) -> None:
        BuyPlayerUseCase(uow, cache).execute(
            BuyPlayerCommand(listing_id=market["listing"].id, buyer_user_id=market["buyer"].id)
        )
        kinds = [kind for kind, _ in uow.lock_log]
        assert kinds == ["listing", "player", "team", "team"]
        team_ids = [entity_id for kind, entity_id in uow.lock_log if kind == "team"]
        assert team_ids == sorted(team_ids, key=lambda t: t.hex)

    def test_second_purchase_of_same_listing_is_not_found(self, store, uow, cache, market) -> None:
        late_buyer, _, _ = store.add_team("late@example.com")
        use_case = BuyPlayerUseCase(uow, cache)
        use_case.execute(
            BuyPlayerCommand(listing_id=market["listing"].id, buyer_user_id=market["buyer"].id)
        )

        with pytest.raises(ListingNotFoundError):
            use_case.execute(
                BuyPlayerCommand(listing_id=market["listing"].id, buyer_user_id=late_buyer.id)
            )
        assert len(store.state.history) == 1

    def test_unknown_listing_is_not_found(self, uow, cache, market) -> None:
        with pytest.raises(ListingNotFoundError):
            BuyPlayerUseCase(uow, cache).execute(
                BuyPlayerCommand(listing_id=uuid4(), buyer_user_id=market["buyer"].id)
            )

    @pytest.mark.parametrize(
        "scenario",
        ["self_purchase", "no_buyer_team", "seller_minimum", "buyer_maximum", "insufficient_funds"],
    )
    def test_failures_leave_store_untouched(self, store, uow, cache, scenario) -> None:
        seller_players = 15 if scenario == "seller_minimum" else 20
        buyer_players = 25 if scenario == "buyer_maximum" else 20
        buyer_budget = 100 if scenario == "insufficient_funds" else 5_000_000

        seller, _, roster = store.add_team("seller@example.com", players=seller_players)
        buyer, _, _ = store.add_team("buyer@example.com", players=buyer_players, budget=buyer_budget)
        listing = store.add_listing(roster[0].id, 1000)

        buyer_id = buyer.id
        if scenario == "self_purchase":
            buyer_id = seller.id
        elif scenario == "no_buyer_team":
            buyer_id = store.add_user("teamless@example.com").id

        expected = {
            "self_purchase": SelfPurchaseError,
            "no_buyer_team": MissingTeamError,
            "seller_minimum": RosterLimitError,
            "buyer_maximum": RosterLimitError,
            "insufficient_funds": InsufficientFundsError,
        }[scenario]

        before = _snapshot(store)
        with pytest.raises(expected):
            BuyPlayerUseCase(uow, cache).execute(
                BuyPlayerCommand(listing_id=listing.id, buyer_user_id=buyer_id)
            )
        assert store.state == before
        assert uow.commits == 0

    def test_insufficient_funds_reports_amounts(self, store, uow, cache) -> None:
        _, _, roster = store.add_team("seller@example.com")
        buyer, _, _ = store.add_team("buyer@example.com", budget=100)
        listing = store.add_listing(roster[0].id, 1000)

        with pytest.raises(InsufficientFundsError) as excinfo:
            BuyPlayerUseCase(uow, cache).execute(
                BuyPlayerCommand(listing_id=listing.id, buyer_user_id=buyer.id)
            )
        assert excinfo.value.required == 950
        assert excinfo.value.available == 100

    def test_exact_budget_is_enough(self, store, uow, cache) -> None:
        _, _, roster = store.add_team("seller@example.com")
        buyer, buyer_team, _ = store.add_team("buyer@example.com", budget=9500)
        listing = store.add_listing(roster[0].id, 10_000)

        result = BuyPlayerUseCase(uow, cache).execute(
            BuyPlayerCommand(listing_id=listing.id, buyer_user_id=buyer.id)
        )
        assert result.final_price == 9500
        assert store.state.teams[buyer_team.id].budget == 0

    def test_orphan_player_is_rejected(self, store, uow, cache, market) -> None:
        del store.state.teams[market["seller_team"].id]
        with pytest.raises(OrphanPlayerError):
            BuyPlayerUseCase(uow, cache).execute(
                BuyPlayerCommand(listing_id=market["listing"].id, buyer_user_id=market["buyer"].id)
            )

    def test_cache_failure_after_commit_is_swallowed(self, store, uow, broken_cache, market) -> None:
        result = BuyPlayerUseCase(uow, broken_cache).execute(
            BuyPlayerCommand(listing_id=market["listing"].id, buyer_user_id=market["buyer"].id)
        )
        assert result.success is True
        assert market["listing"].id not in store.state.listings


# ══════════════════════════════════════════════════════════════════════
# Identity, teams and players
# ══════════════════════════════════════════════════════════════════════


class TestIdentifyUserUseCase:
    """Tests for IdentifyUserUseCase."""

    def _use_case(self, uow, hasher, tokens, team_queue) -> IdentifyUserUseCase:
        return IdentifyUserUseCase(uow=uow, hasher=hasher, tokens=tokens, team_queue=team_queue)

    def test_unknown_email_registers_and_enqueues_team(
        self, store, uow, hasher, tokens, team_queue
    ) -> None:
        result = self._use_case(uow, hasher, tokens, team_queue).execute(
            IdentifyCommand(email="New@Example.com", password="secret1")
        )

        assert result.registered is True
        assert result.message == REGISTERED_MESSAGE
        assert team_queue.enqueued == [result.user_id]
        assert tokens.verify(result.token) == result.user_id
        user = store.state.users[result.user_id]
        assert user.email == "new@example.com"
        assert user.password_hash == "hashed:secret1"

    def test_known_email_with_right_password_logs_in(
        self, store, uow, hasher, tokens, team_queue
    ) -> None:
        user, _, _ = store.add_team("known@example.com")
        result = self._use_case(uow, hasher, tokens, team_queue).execute(
            IdentifyCommand(email="KNOWN@example.com", password="secret")
        )
        assert result.registered is False
        assert result.message == LOGGED_IN_MESSAGE
        assert result.user_id == user.id
        assert team_queue.enqueued == []

    def test_wrong_password_is_rejected(self, store, uow, hasher, tokens, team_queue) -> None:
        store.add_user("known@example.com", "hashed:secret1")
        with pytest.raises(InvalidCredentialsError):
            self._use_case(uow, hasher, tokens, team_queue).execute(
                IdentifyCommand(email="known@example.com", password="wrong-password")
            )

    def test_login_without_team_requests_it_again(
        self, store, uow, hasher, tokens, team_queue
    ) -> None:
        user = store.add_user("stranded@example.com", "hashed:secret1")
        result = self._use_case(uow, hasher, tokens, team_queue).execute(
            IdentifyCommand(email="stranded@example.com", password="secret1")
        )
        assert result.registered is False
        assert team_queue.enqueued == [user.id]

    def test_wrong_password_never_enqueues(self, store, uow, hasher, tokens, team_queue) -> None:
        store.add_user("stranded@example.com", "hashed:secret1")
        with pytest.raises(InvalidCredentialsError):
            self._use_case(uow, hasher, tokens, team_queue).execute(
                IdentifyCommand(email="stranded@example.com", password="wrong-password")
            )
        assert team_queue.enqueued == []

    def test_queue_failure_still_registers(self, store, uow, hasher, tokens) -> None:
        broken_queue = MagicMock()
        broken_queue.enqueue.side_effect = ConnectionError("broker down")

        result = self._use_case(uow, hasher, tokens, broken_queue).execute(
            IdentifyCommand(email="new@example.com", password="secret1")
        )

        assert result.registered is True
        assert result.user_id in store.state.users
        broken_queue.enqueue.assert_called_once_with(result.user_id)

    def test_losing_a_registration_race_logs_in(
        self, store, uow, hasher, tokens, team_queue
    ) -> None:
        winner, _, _ = store.add_team("race@example.com")

        # The first lookup misses, as it would before the winner committed.
        with patch.object(uow.users, "get_by_email", side_effect=[None, winner]):
            result = self._use_case(uow, hasher, tokens, team_queue).execute(
                IdentifyCommand(email="race@example.com", password="secret")
            )

        assert result.registered is False
        assert result.user_id == winner.id
        assert len(store.state.users) == 1
        assert team_queue.enqueued == []


class TestCreateTeamUseCase:
    """Tests for CreateTeamUseCase."""

    def test_creates_team_with_budget_and_squad(self, store, uow) -> None:
        user = store.add_user()
        result = CreateTeamUseCase(uow, generator=RosterGenerator(random.Random(3))).execute(
            CreateTeamCommand(user_id=user.id)
        )

        assert result.user_id == user.id
        assert result.budget == 5_000_000
        assert result.player_count == 20
        assert store.roster_size(result.id) == 20

    def test_is_idempotent(self, store, uow) -> None:
        user = store.add_user()
        use_case = CreateTeamUseCase(uow)
        first = use_case.execute(CreateTeamCommand(user_id=user.id))
        second = use_case.execute(CreateTeamCommand(user_id=user.id))

        assert second.id == first.id
        assert len(store.state.teams) == 1
        assert store.roster_size(first.id) == 20

    def test_unknown_user_raises(self, uow) -> None:
        with pytest.raises(UserNotFoundError):
            CreateTeamUseCase(uow).execute(CreateTeamCommand(user_id=uuid4()))


class TestReadUseCases:
    """Tests for the user, team and player lookups."""

    def test_get_user_includes_team(self, store, uow) -> None:
        user, team, _ = store.add_team()
        result = GetUserUseCase(uow).execute(user.id)
        assert result.email == user.email
        assert result.team_id == team.id

    def test_get_user_missing(self, uow) -> None:
        with pytest.raises(UserNotFoundError):
            GetUserUseCase(uow).execute(uuid4())

    def test_get_team_by_id_and_owner(self, store, uow) -> None:
        user, team, _ = store.add_team(budget=1234)
        by_id = GetTeamUseCase(uow).execute(GetTeamQuery(team_id=team.id))
        by_owner = GetTeamUseCase(uow).execute(GetTeamQuery(owner_user_id=user.id))
        assert by_id == by_owner
        assert by_id.budget == 1234
        assert by_id.player_count == 20

    def test_get_team_pending_creation_is_not_found(self, store, uow) -> None:
        user = store.add_user()
        with pytest.raises(TeamNotFoundError):
            GetTeamUseCase(uow).execute(GetTeamQuery(owner_user_id=user.id))

    def test_get_team_players(self, store, uow) -> None:
        _, team, roster = store.add_team(players=16)
        result = GetTeamPlayersUseCase(uow).execute(team.id)
        assert {p.id for p in result} == {p.id for p in roster}

    def test_get_team_players_unknown_team(self, uow) -> None:
        with pytest.raises(TeamNotFoundError):
            GetTeamPlayersUseCase(uow).execute(uuid4())

    def test_get_player(self, store, uow) -> None:
        _, _, roster = store.add_team()
        result = GetPlayerUseCase(uow).execute(roster[0].id)
        assert result.name == roster[0].name
        assert result.position == "MID"

    def test_get_player_missing(self, uow) -> None:
        with pytest.raises(PlayerNotFoundError):
            GetPlayerUseCase(uow).execute(uuid4())


class TestUpdatePlayerUseCase:
    """Tests for UpdatePlayerUseCase."""

    def test_owner_renames_and_repositions(self, store, uow, cache) -> None:
        user, team, roster = store.add_team()
        result = UpdatePlayerUseCase(uow, cache).execute(
            UpdatePlayerCommand(
                player_id=roster[0].id, user_id=user.id, name="Niko Kosta", position="GK"
            )
        )
        assert result.name == "Niko Kosta"
        assert result.position == "GK"
        stored = store.state.players[roster[0].id]
        assert stored.position is PlayerPosition.GK
        assert stored.team_id == team.id
        assert cache.invalidations == 1
        assert uow.lock_log == [("player", roster[0].id)]

    def test_omitted_fields_are_kept(self, store, uow, cache) -> None:
        user, _, roster = store.add_team()
        result = UpdatePlayerUseCase(uow, cache).execute(
            UpdatePlayerCommand(player_id=roster[0].id, user_id=user.id, name="Sam Miller")
        )
        assert result.position == roster[0].position.value

    def test_non_owner_is_forbidden(self, store, uow, cache) -> None:
        _, _, roster = store.add_team("owner@example.com")
        other = store.add_user("other@example.com")
        with pytest.raises(NotOwnerError):
            UpdatePlayerUseCase(uow, cache).execute(
                UpdatePlayerCommand(player_id=roster[0].id, user_id=other.id, name="X")
            )
