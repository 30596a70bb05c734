"""
TokenLens - Scoring Rules (8)
Liquidity, Volume/MCap, Price Action, ATH Proximity, Market Cap Tier,
Trader Performance, Transaction Activity, Community & Development

Each rule reads its own slice of CanonicalMetrics and never sees another
rule's output. Breakpoints live in the tier tables below; comparisons are
strict (value must exceed the threshold).
"""
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from tokenlens.data.models import CanonicalMetrics

# (threshold, points, finding) checked top-down; first threshold exceeded wins
Tier = Tuple[float, int, str]

LIQUIDITY_TIERS: Tuple[Tier, ...] = (
    (1_000_000, 25, "Deep liquidity (${value:,.0f}) supports large trades"),
    (500_000, 15, "Solid liquidity (${value:,.0f})"),
    (100_000, 8, "Moderate liquidity (${value:,.0f})"),
)

VOLUME_RATIO_TIERS: Tuple[Tier, ...] = (
    (0.10, 20, "High trading activity: volume is {value:.1%} of market cap"),
    (0.05, 12, "Healthy trading activity: volume is {value:.1%} of market cap"),
)
LOW_VOLUME_USD = 10_000

STABLE_CHANGE_PCT = 5.0
STABLE_MIN_VOLUME_USD = 100_000
STABLE_POINTS = 15
PUMP_CHANGE_PCT = 20.0
DIP_CHANGE_PCT = -20.0

NEAR_ATH_RATIO = 0.8
DEEP_DISCOUNT_RATIO = 0.1

MARKET_CAP_TIERS: Tuple[Tier, ...] = (
    (100_000_000, 8, "Large market cap (${value:,.0f})"),
    (10_000_000, 10, "Mid market cap (${value:,.0f}) with room to grow"),
    (1_000_000, 6, "Small market cap (${value:,.0f})"),
)

WIN_RATE_TIERS: Tuple[Tier, ...] = (
    (60.0, 20, "Early traders are mostly profitable ({value:.0f}% win rate)"),
)
WIN_RATE_MODERATE = (40.0, 12)
WIN_RATE_POOR = 30.0
MIN_TRADER_SAMPLE = 10

TX_COUNT_TIERS: Tuple[Tier, ...] = (
    (1000, 10, "Very active trading ({value:,.0f} transactions in 24h)"),
    (100, 6, "Active trading ({value:,.0f} transactions in 24h)"),
)
LOW_TX_COUNT = 50

COMMUNITY_THRESHOLD = 50.0
DEVELOPER_THRESHOLD = 50.0
COMMUNITY_DEV_POINTS = 5


def match_tier(value: float, tiers: Tuple[Tier, ...]) -> Optional[Tier]:
    """Return the first tier whose threshold the value exceeds."""
    for tier in tiers:
        if value > tier[0]:
            return tier
    return None


class RuleOutcome:
    """Points plus the findings and risks one rule contributes."""

    def __init__(self, points: int = 0, findings: Optional[List[str]] = None,
                 risks: Optional[List[str]] = None):
        self.points = points
        self.findings = findings or []
        self.risks = risks or []

    def __repr__(self) -> str:
        return f"RuleOutcome(+{self.points}, findings={len(self.findings)}, risks={len(self.risks)})"


class BaseRule(ABC):
    """A single independent scoring rule."""

    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    def evaluate(self, metrics: CanonicalMetrics) -> RuleOutcome:
        pass

    def _from_tier(self, value: float, tiers: Tuple[Tier, ...],
                   otherwise: Optional[str] = None) -> RuleOutcome:
        tier = match_tier(value, tiers)
        if tier is not None:
            return RuleOutcome(tier[1], findings=[tier[2].format(value=value)])
        if otherwise:
            return RuleOutcome(risks=[otherwise.format(value=value)])
        return RuleOutcome()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name})"


class LiquidityRule(BaseRule):
    def __init__(self):
        super().__init__(name="liquidity")

    def evaluate(self, metrics: CanonicalMetrics) -> RuleOutcome:
        return self._from_tier(
            metrics.liquidity_usd, LIQUIDITY_TIERS,
            otherwise="Low liquidity (${value:,.0f}) raises slippage and exit risk",
        )


class VolumeRatioRule(BaseRule):
    def __init__(self):
        super().__init__(name="volume_ratio")

    def evaluate(self, metrics: CanonicalMetrics) -> RuleOutcome:
        outcome = self._from_tier(metrics.volume_to_market_cap_ratio, VOLUME_RATIO_TIERS)
        if outcome.points == 0 and metrics.volume_24h < LOW_VOLUME_USD:
            outcome.risks.append(f"Very low 24h volume (${metrics.volume_24h:,.0f})")
        return outcome


class PriceActionRule(BaseRule):
    def __init__(self):
        super().__init__(name="price_action")

    def evaluate(self, metrics: CanonicalMetrics) -> RuleOutcome:
        change = metrics.price_change_24h_pct
        if abs(change) < STABLE_CHANGE_PCT and metrics.volume_24h > STABLE_MIN_VOLUME_USD:
            return RuleOutcome(STABLE_POINTS, findings=[f"Stable price action ({change:+.1f}% in 24h) on real volume"])
        if change > PUMP_CHANGE_PCT:
            return RuleOutcome(risks=[f"Possible pump: price up {change:.1f}% in 24h"])
        if change < DIP_CHANGE_PCT:
            return RuleOutcome(findings=[f"Sharp dip ({change:.1f}% in 24h) may be an entry opportunity"])
        return RuleOutcome()


class AthProximityRule(BaseRule):
    def __init__(self):
        super().__init__(name="ath_proximity")

    def evaluate(self, metrics: CanonicalMetrics) -> RuleOutcome:
        ratio = metrics.price_to_ath_ratio
        if ratio > NEAR_ATH_RATIO:
            return RuleOutcome(risks=[f"Trading near all-time high ({ratio:.0%} of ATH)"])
        if 0 < ratio < DEEP_DISCOUNT_RATIO:
            return RuleOutcome(findings=[f"Deep discount to all-time high ({ratio:.1%} of ATH)"])
        return RuleOutcome()


class MarketCapTierRule(BaseRule):
    def __init__(self):
        super().__init__(name="market_cap_tier")

    def evaluate(self, metrics: CanonicalMetrics) -> RuleOutcome:
        return self._from_tier(
            metrics.market_cap, MARKET_CAP_TIERS,
            otherwise="Micro-cap token (${value:,.0f}) is highly volatile",
        )


class TraderPerformanceRule(BaseRule):
    def __init__(self):
        super().__init__(name="trader_performance")

    def evaluate(self, metrics: CanonicalMetrics) -> RuleOutcome:
        perf = metrics.trader_performance
        if perf is None:
            return RuleOutcome()

        win_rate = perf.win_rate_pct
        outcome = self._from_tier(win_rate, WIN_RATE_TIERS)
        if outcome.points == 0:
            floor, points = WIN_RATE_MODERATE
            if win_rate >= floor:
                outcome = RuleOutcome(points, findings=[f"Mixed trader results ({win_rate:.0f}% win rate)"])
            elif win_rate < WIN_RATE_POOR:
                outcome.risks.append(f"Most early traders lost money ({win_rate:.0f}% win rate)")

        if perf.total_traders < MIN_TRADER_SAMPLE:
            outcome.risks.append(f"Small trader sample ({perf.total_traders}) limits confidence")
        return outcome


class TransactionActivityRule(BaseRule):
    def __init__(self):
        super().__init__(name="transaction_activity")

    def evaluate(self, metrics: CanonicalMetrics) -> RuleOutcome:
        tx_count = metrics.tx_count_24h
        outcome = self._from_tier(tx_count, TX_COUNT_TIERS)
        if tx_count < LOW_TX_COUNT:
            outcome.risks.append(f"Thin on-chain activity ({tx_count} transactions in 24h)")
        return outcome


class CommunityDevRule(BaseRule):
    def __init__(self):
        super().__init__(name="community_dev")

    def evaluate(self, metrics: CanonicalMetrics) -> RuleOutcome:
        outcome = RuleOutcome()
        if metrics.community_score > COMMUNITY_THRESHOLD:
            outcome.points += COMMUNITY_DEV_POINTS
            outcome.findings.append(f"Strong community engagement (score {metrics.community_score:.0f})")
        dev = metrics.developer_score
        if dev > DEVELOPER_THRESHOLD:
            outcome.points += COMMUNITY_DEV_POINTS
            outcome.findings.append(f"Active development (score {dev:.0f})")
        elif dev > 0:
            outcome.risks.append(f"Limited development activity (score {dev:.0f})")
        return outcome


def default_rules() -> List[BaseRule]:
    """The fixed, ordered rule sequence."""
    return [
        LiquidityRule(),
        VolumeRatioRule(),
        PriceActionRule(),
        AthProximityRule(),
        MarketCapTierRule(),
        TraderPerformanceRule(),
        TransactionActivityRule(),
        CommunityDevRule(),
    ]
