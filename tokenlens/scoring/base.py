"""
TokenLens - Base Scorer Interface
Every scorer returns a standardized, tagged ScoreResult.
"""
from abc import ABC, abstractmethod
from enum import Enum
from typing import Dict, Any, List, Optional, Tuple
from datetime import datetime, timezone

from tokenlens.data.models import CanonicalMetrics, TokenInfo
from tokenlens.utils.helpers import clamp


class Recommendation(str, Enum):
    STRONG_BUY = "STRONG_BUY"
    BUY = "BUY"
    HOLD_WATCH = "HOLD_WATCH"
    AVOID = "AVOID"
    DANGER = "DANGER"


class RiskLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    MEDIUM_HIGH = "MEDIUM_HIGH"
    HIGH = "HIGH"
    EXTREME = "EXTREME"


class Sentiment(str, Enum):
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


# (minimum score, recommendation, risk level), highest band first
RECOMMENDATION_BANDS: Tuple[Tuple[int, Recommendation, RiskLevel], ...] = (
    (80, Recommendation.STRONG_BUY, RiskLevel.LOW),
    (65, Recommendation.BUY, RiskLevel.MEDIUM),
    (45, Recommendation.HOLD_WATCH, RiskLevel.MEDIUM_HIGH),
    (25, Recommendation.AVOID, RiskLevel.HIGH),
    (0, Recommendation.DANGER, RiskLevel.EXTREME),
)

# Risk levels from least to most severe
RISK_ORDER: List[RiskLevel] = [band[2] for band in RECOMMENDATION_BANDS]


def classify_band(score: float) -> Tuple[Recommendation, RiskLevel]:
    """Map a 0-100 score to its recommendation/risk-level band."""
    for minimum, recommendation, risk_level in RECOMMENDATION_BANDS:
        if score >= minimum:
            return recommendation, risk_level
    return Recommendation.DANGER, RiskLevel.EXTREME


def risk_distance(a: RiskLevel, b: RiskLevel) -> int:
    """Number of bands separating two risk levels."""
    return abs(RISK_ORDER.index(a) - RISK_ORDER.index(b))


class ScoreResult:
    """Standardized scorer output."""

    def __init__(
        self,
        tag: str,
        score: float,
        findings: Optional[List[str]] = None,
        risks: Optional[List[str]] = None,
        confidence: float = 0.5,
        failed: bool = False,
        reason: str = "",
        risk_level: Optional[RiskLevel] = None,
        sentiment: Sentiment = Sentiment.NEUTRAL,
    ):
        self.tag = tag
        self.score = int(clamp(score, 0, 100))
        self.findings = findings or []
        self.risks = risks or []
        self.confidence = max(0.0, min(1.0, confidence))
        self.failed = failed
        self.reason = reason
        self.risk_level = risk_level or classify_band(self.score)[1]
        self.sentiment = sentiment
        self.timestamp = datetime.now(timezone.utc).isoformat()

    @classmethod
    def failure(cls, tag: str, reason: str) -> "ScoreResult":
        return cls(tag=tag, score=0, confidence=0.0, failed=True, reason=reason)

    @property
    def recommendation(self) -> Recommendation:
        return classify_band(self.score)[0]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tag": self.tag,
            "score": self.score,
            "recommendation": self.recommendation.value,
            "riskLevel": self.risk_level.value,
            "confidence": round(self.confidence, 2),
            "findings": self.findings,
            "risks": self.risks,
            "sentiment": self.sentiment.value,
            "failed": self.failed,
            "reason": self.reason,
            "timestamp": self.timestamp,
        }

    def __repr__(self) -> str:
        state = "failed" if self.failed else f"{self.score}"
        return f"ScoreResult({self.tag}: {state} @ {self.confidence:.2f})"


class BaseScorer(ABC):
    """Abstract base class for all metric scorers."""

    def __init__(self, tag: str):
        self.tag = tag

    @abstractmethod
    def evaluate(self, metrics: CanonicalMetrics, token_info: Optional[TokenInfo] = None) -> ScoreResult:
        """
        Score the reconciled metrics.
        Must return a ScoreResult; failures are reported, not raised.
        """
        pass

    async def analyze(self, metrics: CanonicalMetrics, token_info: Optional[TokenInfo] = None) -> ScoreResult:
        """Async entry point so a remote scorer can replace a local one."""
        return self.evaluate(metrics, token_info)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(tag={self.tag})"
