"""Scouting fee calculation

Two independent rules are supported:

- the network-membership rule used by investment advisors, and
- the banded country-rate rule, where an active ``ScoutingFeeConfig`` for the
  country/payer/band overrides the default percentage schedule.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterable, Optional, Sequence, Tuple

from marketplace_billing.features.pricing.domain import FeeType, ScoutingFeePayer
from marketplace_billing.models.scouting_fee import ScoutingFeeConfig

logger = logging.getLogger(__name__)

NETWORK_SCOUTING_RATE = Decimal("0.30")
HUNDRED = Decimal("100")


def calculate_network_scouting_fee(
    advisory_fee: Decimal,
    investor_in_network: bool,
    startup_in_network: bool,
) -> Decimal:
    """
    Scouting fee for an advisor-brokered deal

    - both parties in network: no fee
    - exactly one party in network: 30% of the advisory fee
    - neither party in network: the full advisory fee
    """
    advisory_fee = Decimal(advisory_fee)

    if investor_in_network and startup_in_network:
        return Decimal("0")

    if investor_in_network or startup_in_network:
        return advisory_fee * NETWORK_SCOUTING_RATE

    return advisory_fee


@dataclass(frozen=True)
class FeeBand:
    """Half-open amount band ``[amount_min, amount_max)``; ``amount_max == 0`` is unbounded"""
    amount_min: Decimal
    amount_max: Decimal
    fee_type: FeeType
    fee_value: Decimal

    @property
    def is_unbounded(self) -> bool:
        return self.amount_max == 0


def _band(amount_min: str, amount_max: str, percentage: str) -> FeeBand:
    return FeeBand(Decimal(amount_min), Decimal(amount_max), FeeType.PERCENTAGE, Decimal(percentage))


# Default schedule used when no configuration matches
DEFAULT_SCOUTING_FEE_BANDS: Dict[ScoutingFeePayer, Tuple[FeeBand, ...]] = {
    # Startup scouting fee, paid by the investor
    ScoutingFeePayer.INVESTOR: (
        _band("0", "100000", "2.0"),
        _band("100000", "500000", "1.5"),
        _band("500000", "1000000", "1.0"),
        _band("1000000", "0", "0.5"),
    ),
    # Investor scouting fee, paid by the startup
    ScoutingFeePayer.STARTUP: (
        _band("0", "100000", "1.0"),
        _band("100000", "500000", "0.8"),
        _band("500000", "1000000", "0.5"),
        _band("1000000", "0", "0.3"),
    ),
}


def band_contains(amount_min: Decimal, amount_max: Decimal, amount: Decimal) -> bool:
    """True if ``amount`` lies in ``[amount_min, amount_max)`` (``amount_max == 0`` means no upper limit)"""
    if amount < amount_min:
        return False
    return amount_max == 0 or amount < amount_max


def find_band(bands: Iterable[FeeBand], amount: Decimal) -> Optional[FeeBand]:
    """First band containing ``amount``, or None"""
    amount = Decimal(amount)
    for band in bands:
        if band_contains(band.amount_min, band.amount_max, amount):
            return band
    return None


def bands_overlap(first_min: Decimal, first_max: Decimal, second_min: Decimal, second_max: Decimal) -> bool:
    """Whether two half-open bands share at least one amount"""
    first_starts_before_second_ends = second_max == 0 or first_min < second_max
    second_starts_before_first_ends = first_max == 0 or second_min < first_max
    return first_starts_before_second_ends and second_starts_before_first_ends


def validate_band_bounds(amount_min: Decimal, amount_max: Decimal) -> None:
    """
    Raises:
        ValueError: If the band is empty or has a negative bound
    """
    if amount_min < 0 or amount_max < 0:
        raise ValueError("Band bounds must not be negative")
    if amount_max != 0 and amount_max <= amount_min:
        raise ValueError(
            f"Band maximum ({amount_max}) must be greater than minimum ({amount_min}), or 0 for no upper limit"
        )


def validate_no_band_overlap(
    existing: Iterable[ScoutingFeeConfig],
    country: str,
    payer: ScoutingFeePayer,
    amount_min: Decimal,
    amount_max: Decimal,
) -> None:
    """
    Reject a new band that overlaps an active band for the same country and payer

    Raises:
        ValueError: If the band bounds are invalid or overlap an existing band
    """
    validate_band_bounds(amount_min, amount_max)

    for config in existing:
        if not config.is_active or config.country != country or config.user_type != payer:
            continue
        if bands_overlap(config.amount_min, config.amount_max, amount_min, amount_max):
            upper = config.amount_max if config.amount_max else "unlimited"
            raise ValueError(
                f"Band [{amount_min}, {amount_max or 'unlimited'}) overlaps existing {payer.value} "
                f"band [{config.amount_min}, {upper}) for {country}"
            )


@dataclass(frozen=True)
class ScoutingFeeQuote:
    """Result of the banded scouting fee lookup"""
    amount: Decimal
    payer: ScoutingFeePayer
    country: str
    fee_type: FeeType
    fee_value: Decimal
    fee: Decimal
    source: str  # "config" or "default"
    config_id: Optional[str] = None


def fee_for_band(amount: Decimal, fee_type: FeeType, fee_value: Decimal) -> Decimal:
    """Apply a band's fee to the raised amount"""
    if fee_type == FeeType.PERCENTAGE:
        return Decimal(amount) * Decimal(fee_value) / HUNDRED
    return Decimal(fee_value)


def resolve_scouting_fee(
    amount: Decimal,
    payer: ScoutingFeePayer | str,
    country: str,
    configs: Sequence[ScoutingFeeConfig] = (),
) -> ScoutingFeeQuote:
    """
    Resolve the banded scouting fee for a raised amount

    An active config for the same country and payer whose band contains the
    amount wins; otherwise the default percentage schedule applies.

    Raises:
        ValueError: If the amount is negative or the payer is unknown
    """
    amount = Decimal(amount)
    if amount < 0:
        raise ValueError("Raised amount must not be negative")
    payer = ScoutingFeePayer(payer)

    for config in configs:
        if not config.is_active or config.country != country or config.user_type != payer:
            continue
        if band_contains(config.amount_min, config.amount_max, amount):
            logger.debug(f"Scouting fee config {config.id} matched {payer.value}/{country} amount {amount}")
            return ScoutingFeeQuote(
                amount=amount,
                payer=payer,
                country=country,
                fee_type=config.fee_type,
                fee_value=config.fee_value,
                fee=fee_for_band(amount, config.fee_type, config.fee_value),
                source="config",
                config_id=config.id,
            )

    band = find_band(DEFAULT_SCOUTING_FEE_BANDS[payer], amount)
    # The default schedule starts at 0 and ends unbounded, so a non-negative amount always matches
    assert band is not None
    return ScoutingFeeQuote(
        amount=amount,
        payer=payer,
        country=country,
        fee_type=band.fee_type,
        fee_value=band.fee_value,
        fee=fee_for_band(amount, band.fee_type, band.fee_value),
        source="default",
    )
