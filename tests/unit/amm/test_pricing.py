"""Tests for constant product pricing."""

import pytest

from pairdex.amm.pricing import (
    DEFAULT_FEE_MULTIPLIER,
    constant_product,
    get_amount_in,
    get_amount_out,
    quote,
)
from pairdex.errors import (
    InsufficientAmount,
    InsufficientInputAmount,
    InsufficientLiquidity,
    InsufficientOutputAmount,
)
from tests.helpers import seed_pool


class TestQuote:
    """Tests for ratio projection."""

    def test_quote_projects_ratio(self):
        """quote(50, 100, 200) = 100."""
        assert quote(50, 100, 200) == 100

    def test_quote_rounds_down(self):
        assert quote(1, 3, 2) == 0

    def test_quote_zero_amount_raises(self):
        with pytest.raises(InsufficientAmount):
            quote(0, 100, 200)

    def test_quote_empty_reserve_raises(self):
        with pytest.raises(InsufficientLiquidity):
            quote(10, 0, 200)


class TestGetAmountOut:
    """Tests for exact-input pricing."""

    def test_default_fee_multiplier(self):
        """0.3% fee leaves 9970 of every 10000 units."""
        assert DEFAULT_FEE_MULTIPLIER == 9970

    def test_small_input_into_deep_reserve(self):
        """10 * 997 * 200000 // (100 * 1000 + 10 * 997) = 18132."""
        assert get_amount_out(10, 100, 200_000) == 18132

    def test_output_matches_fee_formula(self):
        """100 in against (1000, 2000) gives 181."""
        assert get_amount_out(100, 1000, 2000) == 181

    def test_output_below_reserve_for_huge_input(self):
        """Output never reaches the output reserve."""
        assert get_amount_out(10**30, 1000, 2000) == 1999

    def test_zero_fee(self):
        """With no fee the formula is plain x * y = k."""
        assert get_amount_out(100, 1000, 2000, fee_multiplier=10_000) == 181
        assert get_amount_out(1000, 1000, 2000, fee_multiplier=10_000) == 1000

    def test_zero_input_raises(self):
        with pytest.raises(InsufficientInputAmount):
            get_amount_out(0, 1000, 2000)

    def test_empty_reserve_raises(self):
        with pytest.raises(InsufficientLiquidity):
            get_amount_out(100, 1000, 0)


class TestGetAmountIn:
    """Tests for exact-output pricing."""

    def test_required_input(self):
        """181 out of (1000, 2000) needs 100 in."""
        assert get_amount_in(181, 1000, 2000) == 100

    def test_required_input_covers_output(self):
        """Paying the quoted input always yields at least the requested output."""
        for amount_out in (1, 7, 181, 999, 1500, 1999):
            amount_in = get_amount_in(amount_out, 1000, 2000)
            assert get_amount_out(amount_in, 1000, 2000) >= amount_out

    def test_zero_output_raises(self):
        with pytest.raises(InsufficientOutputAmount):
            get_amount_in(0, 1000, 2000)

    def test_output_draining_reserve_raises(self):
        with pytest.raises(InsufficientLiquidity):
            get_amount_in(2000, 1000, 2000)


class TestSimulateSwap:
    """Tests for simulating against a live pool."""

    def test_simulate_swap_uses_pool_reserves(self, registry, token_a, token_b):
        """simulate_swap orders reserves by input asset."""
        pool = seed_pool(registry, token_a, token_b, 1000, 2000)
        result = constant_product.simulate_swap(pool, token_b.address, 200)
        assert result.amount_out == get_amount_out(200, 2000, 1000)
        assert result.asset_out == token_a.address
        assert result.pool_address == pool.address
