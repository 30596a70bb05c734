"""
TokenLens - Consensus Sub-Scorers (3)
Research (fundamentals), Market (trading dynamics), Contract (address & exposure)

Each scorer looks at a different slice of the same reconciled metrics and
reports failure instead of a score when no provider supplied a usable price.
"""
from typing import List, Optional

from tokenlens.data.models import CanonicalMetrics, TokenInfo
from tokenlens.scoring.base import BaseScorer, ScoreResult, Sentiment, classify_band
from tokenlens.utils.helpers import is_valid_token_identifier

NO_DATA_REASON = "no_usable_market_data"


class ResearchScorer(BaseScorer):
    """Project fundamentals: size, community and developer activity."""

    BASE_SCORE = 60
    CONFIDENCE = 0.85
    POSITIVE_ABOVE = 70

    def __init__(self):
        super().__init__(tag="research")

    def evaluate(self, metrics: CanonicalMetrics, token_info: Optional[TokenInfo] = None) -> ScoreResult:
        if not metrics.has_data:
            return ScoreResult.failure(self.tag, NO_DATA_REASON)

        score = self.BASE_SCORE
        findings: List[str] = []

        if metrics.market_cap > 1_000_000_000:
            score += 25
            findings.append("Large market capitalization indicates an established project")
        elif metrics.market_cap > 100_000_000:
            score += 15
            findings.append("Moderate market capitalization suggests an emerging project with growth potential")
        else:
            score += 5
            findings.append("Small market cap indicates an early-stage project with a higher risk/reward profile")

        if metrics.community_score > 70:
            score += 20
            findings.append("Exceptional community engagement")
        elif metrics.community_score > 40:
            score += 10
            findings.append("Moderate community engagement")

        if metrics.developer_score > 70:
            score += 15
            findings.append("High developer activity")
        elif metrics.developer_score > 40:
            score += 8
            findings.append("Moderate developer activity")

        sentiment = Sentiment.POSITIVE if min(score, 100) > self.POSITIVE_ABOVE else Sentiment.NEGATIVE
        return ScoreResult(self.tag, score, findings=findings, confidence=self.CONFIDENCE, sentiment=sentiment)


class MarketScorer(BaseScorer):
    """Trading dynamics: volume, momentum and DEX liquidity."""

    BASE_SCORE = 65
    CONFIDENCE = 0.80

    def __init__(self):
        super().__init__(tag="market")

    def evaluate(self, metrics: CanonicalMetrics, token_info: Optional[TokenInfo] = None) -> ScoreResult:
        if not metrics.has_data:
            return ScoreResult.failure(self.tag, NO_DATA_REASON)

        score = self.BASE_SCORE
        findings: List[str] = []
        risks: List[str] = []

        ratio = metrics.volume_to_market_cap_ratio
        if ratio > 0.15:
            score += 20
            findings.append("Exceptional trading volume relative to market cap")
        elif ratio > 0.05:
            score += 10
            findings.append("Healthy trading volume supports price stability")

        change = metrics.price_change_24h_pct
        if change > 10:
            score += 15
            findings.append("Strong positive momentum over 24h")
        elif change < -15:
            score -= 15
            risks.append("Significant 24h price decline indicates selling pressure")

        if metrics.liquidity_usd > 1_000_000:
            score += 15
            findings.append("Strong DEX liquidity enables large trades")

        if change > 5:
            sentiment = Sentiment.POSITIVE
        elif change < -5:
            sentiment = Sentiment.NEGATIVE
        else:
            sentiment = Sentiment.NEUTRAL

        return ScoreResult(self.tag, score, findings=findings, risks=risks,
                           confidence=self.CONFIDENCE, sentiment=sentiment)


class ContractScorer(BaseScorer):
    """Address validity and liquidity-drain exposure."""

    BASE_SCORE = 70
    CONFIDENCE = 0.75

    def __init__(self):
        super().__init__(tag="contract")

    def evaluate(self, metrics: CanonicalMetrics, token_info: Optional[TokenInfo] = None) -> ScoreResult:
        if not metrics.has_data:
            return ScoreResult.failure(self.tag, NO_DATA_REASON)

        score = self.BASE_SCORE
        findings: List[str] = []
        risks: List[str] = []

        address = token_info.address if token_info else ""
        if is_valid_token_identifier(address):
            score += 10
            findings.append("Contract address format validation passed")
        else:
            score -= 20
            risks.append("Invalid or suspicious contract address")

        if metrics.market_cap > 500_000_000:
            score += 15
            findings.append("Large market cap reduces the risk of a sudden liquidity drain")

        if metrics.liquidity_usd < 100_000:
            score -= 15
            risks.append("Low liquidity leaves the token open to manipulation")

        _, risk_level = classify_band(max(0, min(score, 100)))
        return ScoreResult(self.tag, score, findings=findings, risks=risks,
                           confidence=self.CONFIDENCE, risk_level=risk_level)


def default_sub_scorers() -> List[BaseScorer]:
    return [ResearchScorer(), MarketScorer(), ContractScorer()]
