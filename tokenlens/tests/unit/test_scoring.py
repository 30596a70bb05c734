"""
TokenLens - Unit Tests for Rule Scoring, Banding and Sub-Scorers
"""
import pytest

from tokenlens.config.settings import ReconcileSettings
from tokenlens.data.models import TokenInfo, TraderPerformance
from tokenlens.engines.reconciler import MetricReconciler
from tokenlens.scoring.base import (
    RECOMMENDATION_BANDS, RISK_ORDER, Recommendation, RiskLevel, ScoreResult, Sentiment,
    classify_band, risk_distance,
)
from tokenlens.scoring.rules import (
    AthProximityRule, CommunityDevRule, LiquidityRule, MarketCapTierRule, PriceActionRule,
    TraderPerformanceRule, TransactionActivityRule, VolumeRatioRule, default_rules, match_tier,
    LIQUIDITY_TIERS,
)
from tokenlens.scoring.rule_scorer import RuleScorer
from tokenlens.scoring.sub_scorers import ContractScorer, MarketScorer, ResearchScorer

SOLANA_MINT = "So11111111111111111111111111111111111111112"


def _perf(win_rate: float, total: int = 20) -> TraderPerformance:
    return TraderPerformance(total_traders=total, win_rate_pct=win_rate)


# ─── Banding ────────────────────────────────────────────────────

class TestBanding:
    @pytest.mark.parametrize("score,expected", [
        (100, (Recommendation.STRONG_BUY, RiskLevel.LOW)),
        (80, (Recommendation.STRONG_BUY, RiskLevel.LOW)),
        (79, (Recommendation.BUY, RiskLevel.MEDIUM)),
        (65, (Recommendation.BUY, RiskLevel.MEDIUM)),
        (64, (Recommendation.HOLD_WATCH, RiskLevel.MEDIUM_HIGH)),
        (45, (Recommendation.HOLD_WATCH, RiskLevel.MEDIUM_HIGH)),
        (44, (Recommendation.AVOID, RiskLevel.HIGH)),
        (25, (Recommendation.AVOID, RiskLevel.HIGH)),
        (24, (Recommendation.DANGER, RiskLevel.EXTREME)),
        (0, (Recommendation.DANGER, RiskLevel.EXTREME)),
    ])
    def test_band_edges(self, score, expected):
        assert classify_band(score) == expected

    def test_total_monotonic_partition(self):
        order = [band[1] for band in RECOMMENDATION_BANDS]
        previous = len(order) - 1
        for score in range(0, 101):
            recommendation, risk = classify_band(score)
            rank = order.index(recommendation)
            assert RISK_ORDER.index(risk) == rank
            assert rank <= previous
            previous = rank

    def test_risk_distance(self):
        assert risk_distance(RiskLevel.LOW, RiskLevel.LOW) == 0
        assert risk_distance(RiskLevel.LOW, RiskLevel.MEDIUM_HIGH) == 2
        assert risk_distance(RiskLevel.EXTREME, RiskLevel.LOW) == 4


class TestScoreResult:
    def test_score_clamped(self):
        assert ScoreResult("x", 140).score == 100
        assert ScoreResult("x", -20).score == 0

    def test_failure(self):
        r = ScoreResult.failure("market", "timeout")
        assert r.failed
        assert r.reason == "timeout"
        assert r.to_dict()["failed"] is True

    def test_to_dict(self):
        d = ScoreResult("rules", 70, findings=["f"], confidence=0.7).to_dict()
        assert d["recommendation"] == "BUY"
        assert d["riskLevel"] == "MEDIUM"
        assert d["findings"] == ["f"]


# ─── Individual Rules ───────────────────────────────────────────

class TestRules:
    def test_default_rule_order(self):
        names = [r.name for r in default_rules()]
        assert names == ["liquidity", "volume_ratio", "price_action", "ath_proximity",
                         "market_cap_tier", "trader_performance", "transaction_activity",
                         "community_dev"]

    def test_match_tier_is_strict(self):
        assert match_tier(1_000_000, LIQUIDITY_TIERS)[1] == 15
        assert match_tier(1_000_001, LIQUIDITY_TIERS)[1] == 25
        assert match_tier(100_000, LIQUIDITY_TIERS) is None

    @pytest.mark.parametrize("liquidity,points", [
        (2_000_000, 25), (600_000, 15), (150_000, 8), (100_000, 0), (0, 0),
    ])
    def test_liquidity(self, make_metrics, liquidity, points):
        outcome = LiquidityRule().evaluate(make_metrics(liquidity_usd=liquidity))
        assert outcome.points == points
        assert bool(outcome.risks) == (points == 0)

    def test_volume_ratio(self, make_metrics):
        assert VolumeRatioRule().evaluate(make_metrics(volume_to_market_cap_ratio=0.11)).points == 20
        assert VolumeRatioRule().evaluate(make_metrics(volume_to_market_cap_ratio=0.06)).points == 12
        low = VolumeRatioRule().evaluate(make_metrics(volume_to_market_cap_ratio=0.01, volume_24h=5_000))
        assert low.points == 0 and low.risks
        quiet = VolumeRatioRule().evaluate(make_metrics(volume_to_market_cap_ratio=0.01, volume_24h=50_000))
        assert quiet.points == 0 and not quiet.risks

    def test_price_action(self, make_metrics):
        stable = PriceActionRule().evaluate(make_metrics(price_change_24h_pct=-3, volume_24h=200_000))
        assert stable.points == 15
        thin = PriceActionRule().evaluate(make_metrics(price_change_24h_pct=1, volume_24h=50_000))
        assert thin.points == 0
        pump = PriceActionRule().evaluate(make_metrics(price_change_24h_pct=35, volume_24h=200_000))
        assert pump.points == 0 and pump.risks
        dip = PriceActionRule().evaluate(make_metrics(price_change_24h_pct=-30, volume_24h=200_000))
        assert dip.points == 0 and dip.findings and not dip.risks

    def test_ath_proximity(self, make_metrics):
        assert AthProximityRule().evaluate(make_metrics(price_to_ath_ratio=0.9)).risks
        assert AthProximityRule().evaluate(make_metrics(price_to_ath_ratio=0.05)).findings
        none = AthProximityRule().evaluate(make_metrics(price_to_ath_ratio=0))
        assert not none.findings and not none.risks

    @pytest.mark.parametrize("market_cap,points", [
        (500_000_000, 8), (50_000_000, 10), (5_000_000, 6), (500_000, 0),
    ])
    def test_market_cap_tier(self, make_metrics, market_cap, points):
        outcome = MarketCapTierRule().evaluate(make_metrics(market_cap=market_cap))
        assert outcome.points == points
        assert bool(outcome.risks) == (points == 0)

    def test_trader_performance_absent_contributes_nothing(self, make_metrics):
        outcome = TraderPerformanceRule().evaluate(make_metrics())
        assert outcome.points == 0 and not outcome.risks

    @pytest.mark.parametrize("win_rate,points,risky", [
        (75, 20, False), (60, 12, False), (40, 12, False), (35, 0, False), (20, 0, True),
    ])
    def test_trader_win_rate(self, make_metrics, win_rate, points, risky):
        outcome = TraderPerformanceRule().evaluate(make_metrics(trader_performance=_perf(win_rate)))
        assert outcome.points == points
        assert bool(outcome.risks) == risky

    def test_small_trader_sample_is_a_risk(self, make_metrics):
        outcome = TraderPerformanceRule().evaluate(make_metrics(trader_performance=_perf(80, total=4)))
        assert outcome.points == 20
        assert any("sample" in r for r in outcome.risks)

    def test_transaction_activity(self, make_metrics):
        assert TransactionActivityRule().evaluate(make_metrics(tx_count_24h=1001)).points == 10
        assert TransactionActivityRule().evaluate(make_metrics(tx_count_24h=101)).points == 6
        mid = TransactionActivityRule().evaluate(make_metrics(tx_count_24h=75))
        assert mid.points == 0 and not mid.risks
        assert TransactionActivityRule().evaluate(make_metrics(tx_count_24h=10)).risks

    def test_community_dev(self, make_metrics):
        both = CommunityDevRule().evaluate(make_metrics(community_score=60, developer_score=80))
        assert both.points == 10
        weak_dev = CommunityDevRule().evaluate(make_metrics(developer_score=30))
        assert weak_dev.points == 0 and weak_dev.risks
        unknown = CommunityDevRule().evaluate(make_metrics())
        assert not unknown.risks


# ─── Rule Scorer ────────────────────────────────────────────────

class TestRuleScorer:
    def test_reference_scenario(self, strong_metrics):
        result = RuleScorer().score(strong_metrics)
        assert result.score == 80
        assert result.recommendation == Recommendation.STRONG_BUY
        assert result.risk_level == RiskLevel.LOW

    def test_all_providers_absent(self, all_absent_payloads):
        metrics = MetricReconciler(ReconcileSettings()).reconcile(all_absent_payloads)
        result = RuleScorer().score(metrics)
        assert metrics.primary_source == "none"
        assert result.score == 0
        assert result.recommendation == Recommendation.DANGER
        assert result.risk_level == RiskLevel.EXTREME
        assert result.risks
        assert result.confidence == 0.3

    def test_score_is_clamped(self, make_metrics):
        metrics = make_metrics(
            liquidity_usd=10_000_000, volume_24h=20_000_000, volume_to_market_cap_ratio=0.4,
            price_change_24h_pct=1, market_cap=50_000_000, tx_count_24h=5000,
            community_score=90, developer_score=90, trader_performance=_perf(90, total=100),
        )
        assert RuleScorer().score(metrics).score == 100

    def test_order_does_not_change_score(self, strong_metrics):
        forward = RuleScorer().score(strong_metrics)
        backward = RuleScorer(list(reversed(default_rules()))).score(strong_metrics)
        assert forward.score == backward.score
        assert sorted(forward.findings) == sorted(backward.findings)

    @pytest.mark.parametrize("field,values", [
        ("liquidity_usd", [0, 100_000, 100_001, 500_001, 1_000_001, 50_000_000]),
        ("volume_to_market_cap_ratio", [0, 0.05, 0.051, 0.1, 0.11, 2.0]),
        ("tx_count_24h", [0, 49, 50, 101, 1001, 100_000]),
        ("community_score", [0, 50, 51, 100]),
    ])
    def test_monotonic_in_single_input(self, strong_metrics, field, values):
        scorer = RuleScorer()
        scores = [scorer.score(strong_metrics.model_copy(update={field: v})).score for v in values]
        assert scores == sorted(scores)

    def test_monotonic_in_win_rate(self, make_metrics):
        scorer = RuleScorer()
        scores = [scorer.score(make_metrics(trader_performance=_perf(w))).score
                  for w in (0, 29, 30, 40, 60, 61, 100)]
        assert scores == sorted(scores)

    def test_confidence_grows_with_sources(self, make_metrics, trader_performance):
        single = make_metrics()
        assert RuleScorer.confidence_for(single) == 0.5
        full = make_metrics(
            data_sources_used=["coingecko", "dexscreener", "birdeye", "solana_tracker"],
            trader_performance=trader_performance,
        )
        assert RuleScorer.confidence_for(full) == pytest.approx(0.8)


# ─── Sub-Scorers ────────────────────────────────────────────────

class TestSubScorers:
    def test_all_fail_without_data(self, make_metrics):
        metrics = make_metrics(primary_source="none", data_sources_used=[])
        for scorer in (ResearchScorer(), MarketScorer(), ContractScorer()):
            result = scorer.evaluate(metrics)
            assert result.failed
            assert result.tag == scorer.tag

    def test_research_established_project(self, make_metrics):
        result = ResearchScorer().evaluate(
            make_metrics(market_cap=3_000_000_000, community_score=72.5, developer_score=64)
        )
        assert result.score == 100  # 60 + 25 + 20 + 8, clamped
        assert result.confidence == 0.85
        assert result.sentiment == Sentiment.POSITIVE
        assert len(result.findings) == 3

    def test_research_small_project(self, make_metrics):
        result = ResearchScorer().evaluate(make_metrics(market_cap=1_000_000))
        assert result.score == 65
        assert result.sentiment == Sentiment.NEGATIVE

    def test_market_bullish(self, make_metrics):
        result = MarketScorer().evaluate(make_metrics(
            volume_to_market_cap_ratio=0.2, price_change_24h_pct=12, liquidity_usd=2_000_000,
        ))
        assert result.score == 100
        assert result.sentiment == Sentiment.POSITIVE
        assert result.confidence == 0.8

    def test_market_bearish(self, make_metrics):
        result = MarketScorer().evaluate(make_metrics(price_change_24h_pct=-20))
        assert result.score == 50
        assert result.sentiment == Sentiment.NEGATIVE
        assert result.risks

    def test_market_neutral(self, make_metrics):
        result = MarketScorer().evaluate(make_metrics(volume_to_market_cap_ratio=0.06, price_change_24h_pct=3))
        assert result.score == 75
        assert result.sentiment == Sentiment.NEUTRAL

    def test_contract_valid_address(self, make_metrics):
        info = TokenInfo(address=SOLANA_MINT)
        result = ContractScorer().evaluate(
            make_metrics(market_cap=600_000_000, liquidity_usd=2_000_000), info,
        )
        assert result.score == 95
        assert result.risk_level == RiskLevel.LOW
        assert result.confidence == 0.75

    def test_contract_suspicious_address(self, make_metrics):
        result = ContractScorer().evaluate(make_metrics(), TokenInfo(address="not-an-address!"))
        assert result.score == 35  # 70 - 20 - 15
        assert result.risk_level == RiskLevel.HIGH
        assert len(result.risks) == 2

    def test_contract_accepts_symbol(self, make_metrics):
        result = ContractScorer().evaluate(make_metrics(liquidity_usd=500_000), TokenInfo(address="BONK"))
        assert result.score == 80

    @pytest.mark.asyncio
    async def test_async_analyze(self, make_metrics):
        result = await MarketScorer().analyze(make_metrics())
        assert isinstance(result, ScoreResult)
        assert result.score == 65
