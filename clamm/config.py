"""Engine configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from clamm.constants import DEFAULT_OBSERVATION_CARDINALITY, FEE_TICK_SPACING


def parse_fee_tiers(raw: str) -> dict[int, int]:
    """Parse a fee tier table such as "100:1,500:10,3000:60".

    Args:
        raw: Comma-separated fee:tick_spacing pairs

    Returns:
        Mapping of fee (hundredths of a bip) to tick spacing

    Raises:
        ValueError: If an entry is malformed or out of range
    """
    tiers: dict[int, int] = {}
    for entry in raw.split(","):
        entry = entry.strip()
        if not entry:
            continue
        try:
            fee_str, spacing_str = entry.split(":")
            fee, spacing = int(fee_str), int(spacing_str)
        except ValueError as err:
            raise ValueError(f"Invalid fee tier entry: '{entry}' (expected fee:spacing)") from err
        if not 0 <= fee < 1_000_000:
            raise ValueError(f"Fee {fee} must be in [0, 1000000)")
        if not 0 < spacing < 16384:
            raise ValueError(f"Tick spacing {spacing} must be in (0, 16384)")
        tiers[fee] = spacing
    return tiers


@dataclass(frozen=True)
class EngineConfig:
    """Centralized configuration for pool creation.

    Attributes:
        fee_tick_spacing: Enabled fee tiers mapped to their tick spacing
        observation_cardinality: Oracle slots to reserve when a pool is created
            (1 means the oracle only keeps the latest observation)
    """

    fee_tick_spacing: dict[int, int] = field(default_factory=lambda: dict(FEE_TICK_SPACING))
    observation_cardinality: int = DEFAULT_OBSERVATION_CARDINALITY

    def tick_spacing_for(self, fee: int) -> int | None:
        """Tick spacing of an enabled fee tier, or None if the tier is not enabled."""
        return self.fee_tick_spacing.get(fee)

    @classmethod
    def from_env(cls) -> EngineConfig:
        """Build a config from environment variables.

        Configuration via environment variables:
        - CLAMM_FEE_TIERS: fee:spacing pairs (default: 100:1,500:10,3000:60,10000:200)
        - CLAMM_OBSERVATION_CARDINALITY: oracle slots per new pool (default: 1)
        """
        raw_tiers = os.environ.get("CLAMM_FEE_TIERS")
        tiers = parse_fee_tiers(raw_tiers) if raw_tiers else dict(FEE_TICK_SPACING)
        cardinality = int(
            os.environ.get("CLAMM_OBSERVATION_CARDINALITY", str(DEFAULT_OBSERVATION_CARDINALITY))
        )
        if cardinality < 1:
            raise ValueError(f"CLAMM_OBSERVATION_CARDINALITY must be >= 1, got {cardinality}")
        return cls(fee_tick_spacing=tiers, observation_cardinality=cardinality)


# Default configuration instance
DEFAULT_ENGINE_CONFIG = EngineConfig()
