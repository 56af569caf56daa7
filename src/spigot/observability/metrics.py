"""Prometheus metrics for SPIGOT faucet.

Metrics:
- spigot_claims_total: Counter of claim attempts by outcome
- spigot_tokens_minted_total: Counter of base units minted by the faucet
- spigot_admin_operations_total: Counter of admin operations by outcome
- spigot_token_supply: Gauge of current token total supply
- spigot_faucet_paused: Gauge, 1 while the faucet is paused
- spigot_claim_duration_seconds: Histogram of claim processing duration
"""

from prometheus_client import Counter, Gauge, Histogram

# Counters
CLAIMS = Counter(
    "spigot_claims_total",
    "Total number of claim attempts",
    ["status"],
)

TOKENS_MINTED = Counter(
    "spigot_tokens_minted_total",
    "Total base units minted through the faucet",
)

ADMIN_OPERATIONS = Counter(
    "spigot_admin_operations_total",
    "Total admin operations",
    ["operation", "status"],
)

# Gauges
TOKEN_SUPPLY = Gauge(
    "spigot_token_supply",
    "Current token total supply in base units",
)

FAUCET_PAUSED = Gauge(
    "spigot_faucet_paused",
    "Whether the faucet is paused (1) or accepting claims (0)",
)

# Histograms
CLAIM_DURATION = Histogram(
    "spigot_claim_duration_seconds",
    "Claim processing duration",
    buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 30.0, 120.0),
)
