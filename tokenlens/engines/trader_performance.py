"""
TokenLens - Trader Performance
Aggregate win/loss statistics over trader records classified by realized PnL sign.
"""
from typing import Iterable, Sequence

from tokenlens.data.models import TraderPerformance, TraderRecord
from tokenlens.utils.helpers import clamp, safe_divide


def compute_trader_performance(
    records: Sequence[TraderRecord],
    top_records: Iterable[TraderRecord] = (),
) -> TraderPerformance:
    """
    Classify each record as profitable (pnl > 0) or losing (pnl < 0); flat
    records count toward the total only. top_records can raise the top
    profit but never change counts or averages.
    """
    total_profit = 0.0
    total_loss = 0.0
    profitable = 0
    losing = 0
    top_profit = 0.0
    top_loss = 0.0
    total_volume = 0.0

    for record in records:
        total_volume += max(0.0, record.volume)
        if record.pnl > 0:
            profitable += 1
            total_profit += record.pnl
            top_profit = max(top_profit, record.pnl)
        elif record.pnl < 0:
            losing += 1
            loss = abs(record.pnl)
            total_loss += loss
            top_loss = max(top_loss, loss)

    for record in top_records:
        top_profit = max(top_profit, record.pnl)

    total = len(records)
    return TraderPerformance(
        total_traders=total,
        profitable_traders=profitable,
        losing_traders=losing,
        average_profit=max(0.0, safe_divide(total_profit, profitable)),
        average_loss=max(0.0, safe_divide(total_loss, losing)),
        top_profit_amount=max(0.0, top_profit),
        top_loss_amount=max(0.0, top_loss),
        win_rate_pct=clamp(safe_divide(profitable, total) * 100.0, 0.0, 100.0),
        total_volume=max(0.0, total_volume),
    )
