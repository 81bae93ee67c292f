"""Pool fee tiers and engine defaults."""

# Fee tiers in hundredths of a basis point
# Fee = units / 1,000,000 (e.g., 3000 = 0.3%)
FEE_LOWEST = 100  # 0.01% - stable pairs
FEE_LOW = 500  # 0.05% - stable pairs
FEE_MEDIUM = 3000  # 0.30% - most pairs
FEE_HIGH = 10000  # 1.00% - exotic pairs

FEE_TIERS = [FEE_LOWEST, FEE_LOW, FEE_MEDIUM, FEE_HIGH]

# Tick spacing per fee tier
FEE_TICK_SPACING = {
    FEE_LOWEST: 1,
    FEE_LOW: 10,
    FEE_MEDIUM: 60,
    FEE_HIGH: 200,
}

# Oracle keeps only the latest observation until someone pays to grow it
DEFAULT_OBSERVATION_CARDINALITY = 1

__all__ = [
    "FEE_LOWEST",
    "FEE_LOW",
    "FEE_MEDIUM",
    "FEE_HIGH",
    "FEE_TIERS",
    "FEE_TICK_SPACING",
    "DEFAULT_OBSERVATION_CARDINALITY",
]
