"""Tests for the network and banded scouting fee rules."""

from decimal import Decimal

import pytest

from marketplace_billing.features.pricing.domain import FeeType, ScoutingFeePayer
from marketplace_billing.features.pricing.scouting_fees import (
    DEFAULT_SCOUTING_FEE_BANDS,
    band_contains,
    bands_overlap,
    calculate_network_scouting_fee,
    find_band,
    resolve_scouting_fee,
    validate_band_bounds,
    validate_no_band_overlap,
)
from marketplace_billing.models.scouting_fee import ScoutingFeeConfig


def config(
    config_id="sfc-1",
    country="India",
    payer=ScoutingFeePayer.INVESTOR,
    amount_min="0",
    amount_max="0",
    fee_type=FeeType.PERCENTAGE,
    fee_value="3",
    is_active=True,
) -> ScoutingFeeConfig:
    return ScoutingFeeConfig(
        id=config_id,
        country=country,
        user_type=payer,
        amount_min=Decimal(amount_min),
        amount_max=Decimal(amount_max),
        fee_type=fee_type,
        fee_value=Decimal(fee_value),
        is_active=is_active,
    )


# ============================================================================
# Network rule
# ============================================================================


class TestNetworkScoutingFee:
    def test_both_in_network_is_free(self):
        assert calculate_network_scouting_fee(Decimal("1000"), True, True) == Decimal("0")

    def test_one_side_in_network_is_thirty_percent(self):
        assert calculate_network_scouting_fee(Decimal("1000"), True, False) == Decimal("300")
        assert calculate_network_scouting_fee(Decimal("1000"), False, True) == Decimal("300")

    def test_neither_in_network_is_full_fee(self):
        assert calculate_network_scouting_fee(Decimal("1000"), False, False) == Decimal("1000")


# ============================================================================
# Bands
# ============================================================================


class TestBands:
    def test_band_is_half_open(self):
        assert band_contains(Decimal("100000"), Decimal("500000"), Decimal("100000"))
        assert not band_contains(Decimal("100000"), Decimal("500000"), Decimal("500000"))

    def test_zero_max_is_unbounded(self):
        assert band_contains(Decimal("1000000"), Decimal("0"), Decimal("999999999"))

    def test_default_bands_cover_every_amount_once(self):
        for bands in DEFAULT_SCOUTING_FEE_BANDS.values():
            for amount in ("0", "99999.99", "100000", "500000", "1000000", "50000000"):
                matches = [b for b in bands if band_contains(b.amount_min, b.amount_max, Decimal(amount))]
                assert len(matches) == 1

    def test_find_band_boundary(self):
        band = find_band(DEFAULT_SCOUTING_FEE_BANDS[ScoutingFeePayer.INVESTOR], Decimal("1000000"))
        assert band.amount_min == Decimal("1000000")
        assert band.is_unbounded

    def test_overlap(self):
        assert bands_overlap(Decimal("0"), Decimal("100"), Decimal("50"), Decimal("150"))
        assert not bands_overlap(Decimal("0"), Decimal("100"), Decimal("100"), Decimal("200"))
        assert bands_overlap(Decimal("0"), Decimal("0"), Decimal("500"), Decimal("600"))
        assert bands_overlap(Decimal("1000"), Decimal("0"), Decimal("0"), Decimal("2000"))

    def test_invalid_bounds(self):
        with pytest.raises(ValueError):
            validate_band_bounds(Decimal("500"), Decimal("100"))
        with pytest.raises(ValueError):
            validate_band_bounds(Decimal("-1"), Decimal("100"))
        validate_band_bounds(Decimal("500"), Decimal("0"))

    def test_overlap_only_checked_against_same_country_and_payer(self):
        existing = [
            config(country="India", payer=ScoutingFeePayer.INVESTOR, amount_min="0", amount_max="100000"),
            config(country="Germany", payer=ScoutingFeePayer.STARTUP, amount_min="0", amount_max="100000"),
        ]
        with pytest.raises(ValueError, match="overlaps"):
            validate_no_band_overlap(existing, "India", ScoutingFeePayer.INVESTOR, Decimal("50000"), Decimal("0"))

        validate_no_band_overlap(existing, "India", ScoutingFeePayer.STARTUP, Decimal("50000"), Decimal("0"))
        validate_no_band_overlap(existing, "India", ScoutingFeePayer.INVESTOR, Decimal("100000"), Decimal("0"))

    def test_inactive_bands_do_not_block(self):
        existing = [config(amount_min="0", amount_max="100000", is_active=False)]
        validate_no_band_overlap(existing, "India", ScoutingFeePayer.INVESTOR, Decimal("0"), Decimal("100000"))


# ============================================================================
# Banded rule resolution
# ============================================================================


class TestResolveScoutingFee:
    def test_default_schedule_investor(self):
        quote = resolve_scouting_fee(Decimal("250000"), ScoutingFeePayer.INVESTOR, "India")
        assert quote.fee_value == Decimal("1.5")
        assert quote.fee == Decimal("3750")
        assert quote.source == "default"
        assert quote.config_id is None

    def test_default_schedule_startup(self):
        quote = resolve_scouting_fee(Decimal("50000"), "Startup", "India")
        assert quote.payer == ScoutingFeePayer.STARTUP
        assert quote.fee == Decimal("500")

    def test_one_million_falls_in_top_band(self):
        quote = resolve_scouting_fee(Decimal("1000000"), ScoutingFeePayer.INVESTOR, "India")
        assert quote.fee_value == Decimal("0.5")
        assert quote.fee == Decimal("5000")

    def test_active_config_overrides_default(self):
        configs = [config(amount_min="100000", amount_max="500000", fee_value="3")]
        quote = resolve_scouting_fee(Decimal("250000"), ScoutingFeePayer.INVESTOR, "India", configs)
        assert quote.source == "config"
        assert quote.config_id == "sfc-1"
        assert quote.fee == Decimal("7500")

    def test_fixed_config_fee(self):
        configs = [config(fee_type=FeeType.FIXED, fee_value="2500")]
        quote = resolve_scouting_fee(Decimal("250000"), ScoutingFeePayer.INVESTOR, "India", configs)
        assert quote.fee == Decimal("2500")

    def test_config_outside_band_falls_back(self):
        configs = [config(amount_min="0", amount_max="100000")]
        quote = resolve_scouting_fee(Decimal("250000"), ScoutingFeePayer.INVESTOR, "India", configs)
        assert quote.source == "default"

    def test_ignores_inactive_and_other_country_or_payer(self):
        configs = [
            config(config_id="a", is_active=False),
            config(config_id="b", country="Germany"),
            config(config_id="c", payer=ScoutingFeePayer.STARTUP),
        ]
        quote = resolve_scouting_fee(Decimal("250000"), ScoutingFeePayer.INVESTOR, "India", configs)
        assert quote.source == "default"

    def test_rejects_negative_amount(self):
        with pytest.raises(ValueError):
            resolve_scouting_fee(Decimal("-1"), ScoutingFeePayer.INVESTOR, "India")

    def test_rejects_unknown_payer(self):
        with pytest.raises(ValueError):
            resolve_scouting_fee(Decimal("100"), "Advisor", "India")
