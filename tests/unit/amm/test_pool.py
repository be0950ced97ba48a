"""Tests for the constant product pool engine."""

import pytest

from pairdex.amm.pool import Pool
from pairdex.errors import (
    AlreadyInitialized,
    Forbidden,
    InsufficientInput,
    InsufficientLiquidity,
    InsufficientLiquidityBurned,
    InsufficientLiquidityMinted,
    InvalidOutputRequest,
    InvalidRecipient,
    InvariantViolation,
    NoLiquidityToBurn,
    Reentrant,
    ReserveOverflow,
)
from pairdex.models.events import Burn, Mint, Swap, Sync
from pairdex.safe_int import UINT112_MAX
from tests.helpers import ALICE, BOB, GENESIS_TIME, LP, CallbackToken, seed_pool


@pytest.fixture
def pool(registry, token_a, token_b) -> Pool:
    """Pool seeded with 1000 A / 2000 B."""
    return seed_pool(registry, token_a, token_b, 1000, 2000)


class TestPoolInitialize:
    """Tests for single-use, registry-only initialization."""

    def test_registry_only(self, runtime, registry, token_a, token_b):
        """Only the registry may assign assets."""
        pool = Pool(runtime, "0x" + "99" * 20, registry.address)
        with pytest.raises(Forbidden):
            pool.initialize(ALICE, token_a.address, token_b.address)
        assert pool.asset0 is None

    def test_second_initialize_raises(self, registry, token_a, token_b):
        pool = registry.create_pool(token_a.address, token_b.address)
        with pytest.raises(AlreadyInitialized):
            pool.initialize(registry.address, token_a.address, token_b.address)

    def test_operations_require_initialization(self, runtime, registry):
        pool = runtime.deploy(Pool(runtime, "0x" + "99" * 20, registry.address))
        with pytest.raises(Forbidden):
            pool.mint(ALICE, ALICE)


class TestPoolMint:
    """Tests for share issuance."""

    def test_first_mint(self, registry, token_a, token_b):
        """Depositing (100, 200) into an empty pool issues 141 shares."""
        pool = seed_pool(registry, token_a, token_b, 100, 200)
        assert pool.total_shares == 141
        assert pool.share_balance_of(LP) == 141
        assert pool.get_reserves() == (100, 200, GENESIS_TIME)

    def test_proportional_mint(self, registry, token_a, token_b):
        """Second deposit earns shares against the smaller contribution."""
        pool = seed_pool(registry, token_a, token_b, 100, 200)
        token_a.mint(ALICE, 50)
        token_b.mint(ALICE, 200)
        token_a.transfer(ALICE, pool.address, 50)
        token_b.transfer(ALICE, pool.address, 200)

        shares = pool.mint(ALICE, ALICE)

        assert shares == 70
        assert pool.share_balance_of(ALICE) == 70
        assert (pool.reserve0, pool.reserve1) == (150, 400)

    def test_custody_and_share_ledger_are_separate(self, registry, token_a, token_b):
        """The pool's asset holdings and its share balances are tracked apart."""
        pool = seed_pool(registry, token_a, token_b, 100, 200)
        assert (token_a.balance_of(pool.address), token_b.balance_of(pool.address)) == (100, 200)
        assert pool.balance_of(pool.address) == 0

        pool.transfer(LP, pool.address, 41)
        assert pool.burn(LP, LP) == (29, 58)

    def test_nothing_deposited_raises(self, pool):
        with pytest.raises(InsufficientLiquidityMinted):
            pool.mint(ALICE, ALICE)

    def test_one_sided_first_deposit_raises(self, registry, token_a, token_b):
        """sqrt(100 * 0) is zero shares."""
        pool = registry.create_pool(token_a.address, token_b.address)
        token_a.mint(pool.address, 100)
        with pytest.raises(InsufficientLiquidityMinted):
            pool.mint(ALICE, ALICE)
        assert pool.total_shares == 0
        assert pool.get_reserves()[:2] == (0, 0)

    def test_mint_emits_events(self, runtime, registry, token_a, token_b):
        pool = seed_pool(registry, token_a, token_b, 100, 200)
        (mint,) = runtime.events_of(Mint, emitter=pool.address)
        assert (mint.amount0, mint.amount1, mint.shares) == (100, 200, 141)
        assert mint.recipient == LP
        sync = runtime.events_of(Sync, emitter=pool.address)[-1]
        assert (sync.reserve0, sync.reserve1) == (100, 200)

    def test_reserve_overflow_reverts(self, registry, token_a, token_b):
        """Balances wider than 112 bits cannot be reconciled."""
        pool = registry.create_pool(token_a.address, token_b.address)
        token_a.mint(pool.address, UINT112_MAX + 1)
        token_b.mint(pool.address, 1)
        with pytest.raises(ReserveOverflow):
            pool.mint(ALICE, ALICE)
        assert pool.total_shares == 0
        assert pool.share_balance_of(ALICE) == 0


class TestPoolBurn:
    """Tests for share redemption."""

    def test_burn_all(self, registry, token_a, token_b):
        """Burning every share returns the full deposit."""
        pool = seed_pool(registry, token_a, token_b, 100, 200)
        pool.transfer(LP, pool.address, 141)

        amounts = pool.burn(LP, BOB)

        assert amounts == (100, 200)
        assert token_a.balance_of(BOB) == 100
        assert token_b.balance_of(BOB) == 200
        assert pool.total_shares == 0
        assert pool.get_reserves()[:2] == (0, 0)

    def test_burn_partial(self, runtime, registry, token_a, token_b):
        """70 of 141 shares against (100, 200) pays (49, 99)."""
        pool = seed_pool(registry, token_a, token_b, 100, 200)
        pool.transfer(LP, pool.address, 70)

        assert pool.burn(LP, LP) == (49, 99)
        assert (pool.reserve0, pool.reserve1) == (51, 101)
        assert pool.total_shares == 71
        (burn,) = runtime.events_of(Burn, emitter=pool.address)
        assert burn.shares == 70

    def test_burn_pays_donations(self, registry, token_a, token_b):
        """Assets sent outside of mint are paid out to burners."""
        pool = seed_pool(registry, token_a, token_b, 100, 200)
        token_a.mint(pool.address, 41)
        pool.transfer(LP, pool.address, 141)
        assert pool.burn(LP, LP) == (141, 200)

    def test_no_shares_in_pool_raises(self, pool):
        with pytest.raises(NoLiquidityToBurn):
            pool.burn(LP, LP)

    def test_dust_burn_raises(self, registry, token_a, token_b):
        """A burn that pays zero of either asset is rejected."""
        pool = seed_pool(registry, token_a, token_b, 1, 10_000)
        pool.transfer(LP, pool.address, 1)
        with pytest.raises(InsufficientLiquidityBurned):
            pool.burn(LP, LP)
        assert pool.share_balance_of(pool.address) == 1


class TestPoolSwap:
    """Tests for optimistic swaps against (1000, 2000)."""

    def test_small_input_into_deep_reserve(self, registry, token_a, token_b):
        """10 A against (100, 200000) buys exactly 18132 B and not one more."""
        pool = seed_pool(registry, token_a, token_b, 100, 200_000)
        token_a.mint(pool.address, 10)
        with pytest.raises(InvariantViolation):
            pool.swap(ALICE, 0, 18133, BOB)
        pool.swap(ALICE, 0, 18132, BOB)
        assert (pool.reserve0, pool.reserve1) == (110, 181_868)

    def test_swap_exact_output(self, runtime, pool, token_a, token_b):
        """Paying 100 A allows taking 181 B."""
        token_a.mint(ALICE, 100)
        token_a.transfer(ALICE, pool.address, 100)

        pool.swap(ALICE, 0, 181, BOB)

        assert token_b.balance_of(BOB) == 181
        assert (pool.reserve0, pool.reserve1) == (1100, 1819)
        (swap,) = runtime.events_of(Swap, emitter=pool.address)
        assert (swap.amount0_in, swap.amount1_in) == (100, 0)
        assert (swap.amount0_out, swap.amount1_out) == (0, 181)

    def test_taking_too_much_breaks_invariant(self, pool, token_a, token_b):
        """182 B for 100 A is rejected and nothing moves."""
        token_a.mint(ALICE, 100)
        token_a.transfer(ALICE, pool.address, 100)

        with pytest.raises(InvariantViolation):
            pool.swap(ALICE, 0, 182, BOB)

        assert token_b.balance_of(BOB) == 0
        assert (pool.reserve0, pool.reserve1) == (1000, 2000)

    def test_no_input_raises(self, pool):
        with pytest.raises(InsufficientInput):
            pool.swap(ALICE, 0, 10, BOB)

    @pytest.mark.parametrize("outputs", [(0, 0), (1, 1), (-1, 5)])
    def test_exactly_one_output_required(self, pool, outputs):
        with pytest.raises(InvalidOutputRequest):
            pool.swap(ALICE, *outputs, BOB)

    def test_output_at_reserve_raises(self, pool):
        with pytest.raises(InsufficientLiquidity):
            pool.swap(ALICE, 1000, 0, BOB)

    def test_recipient_cannot_be_pool_asset(self, pool, token_a, token_b):
        token_a.mint(pool.address, 100)
        with pytest.raises(InvalidRecipient):
            pool.swap(ALICE, 0, 181, token_b.address)

    def test_invariant_grows_with_fees(self, pool, token_a):
        """k after a swap is at least k before."""
        k_before = pool.reserve0 * pool.reserve1
        token_a.mint(pool.address, 100)
        pool.swap(ALICE, 0, 181, BOB)
        assert pool.reserve0 * pool.reserve1 >= k_before

    def test_last_update_tracks_clock(self, clock, pool, token_a):
        clock.advance(60)
        token_a.mint(pool.address, 100)
        pool.swap(ALICE, 0, 181, BOB)
        assert pool.last_update == GENESIS_TIME + 60


class TestPoolSkimSync:
    """Tests for reconciling donations."""

    def test_skim_sends_excess(self, pool, token_a):
        token_a.mint(pool.address, 50)
        assert pool.skim(ALICE, BOB) == (50, 0)
        assert token_a.balance_of(BOB) == 50
        assert (pool.reserve0, pool.reserve1) == (1000, 2000)

    def test_sync_absorbs_excess(self, pool, token_b):
        token_b.mint(pool.address, 50)
        pool.sync(ALICE)
        assert (pool.reserve0, pool.reserve1) == (1000, 2050)

    def test_balance_below_reserve_raises(self, pool, token_a):
        """A pool holding less than its reserves cannot mint or skim until synced."""
        token_a.burn(pool.address, 1)
        with pytest.raises(InsufficientLiquidity):
            pool.skim(ALICE, BOB)
        with pytest.raises(InsufficientLiquidity):
            pool.mint(ALICE, ALICE)
        assert pool.share_balance_of(ALICE) == 0

        pool.sync(ALICE)
        assert (pool.reserve0, pool.reserve1) == (999, 2000)


class TestPoolReentrancy:
    """Tests for the pool's reentrancy guard."""

    def test_callback_during_swap_is_rejected(self, runtime, registry, token_a):
        """A transfer hook that calls back into the pool aborts the whole swap."""
        hostile = CallbackToken.deploy(runtime, "EVIL", "0x" + "ee" * 20)
        pool = seed_pool(registry, token_a, hostile, 1000, 2000)
        hostile.callback = lambda: pool.sync(BOB)

        token_a.mint(ALICE, 100)
        token_a.transfer(ALICE, pool.address, 100)
        with pytest.raises(Reentrant):
            pool.swap(ALICE, 0, 181, BOB)

        assert hostile.balance_of(BOB) == 0
        assert (pool.reserve0, pool.reserve1) == (1000, 2000)

    def test_guard_released_after_failure(self, pool, token_a):
        """A failed call does not leave the pool locked."""
        with pytest.raises(InsufficientInput):
            pool.swap(ALICE, 0, 10, BOB)
        token_a.mint(pool.address, 100)
        pool.swap(ALICE, 0, 181, BOB)
