# analytics.py

import re
from decimal import Decimal, ROUND_HALF_UP
from dataclasses import dataclass, field, asdict
from datetime import timedelta
from typing import List

from models import Pair, Result, Setup

# Leading decimal literal, the part of "2.5R" or "1:2" that counts as the ratio
_NUMBER_PREFIX = re.compile(r'\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)', re.ASCII)


@dataclass
class BucketStat:
    key: str
    total: int
    wins: int
    win_rate: float


@dataclass
class DetailStat(BucketStat):
    avg_risk_reward: float = 0
    breakdown: List[BucketStat] = field(default_factory=list)


@dataclass
class PeriodStat:
    label: str
    wins: int = 0
    losses: int = 0

    @property
    def total(self):
        return self.wins + self.losses


@dataclass
class AnalyticsSnapshot:
    total_trades: int
    wins: int
    losses: int
    win_rate: float
    avg_risk_reward: float
    setup_stats: List[BucketStat]
    pair_stats: List[BucketStat]
    setup_details: List[DetailStat]
    pair_details: List[DetailStat]
    monthly: List[PeriodStat]
    weekly: List[PeriodStat]

    def to_dict(self):
        data = asdict(self)
        # asdict() skips properties, so carry the period totals explicitly
        for name in ('monthly', 'weekly'):
            for row, period in zip(data[name], getattr(self, name)):
                row['total'] = period.total
        return data


def parse_risk_reward(text):
    """Return the numeric value of a free-text risk/reward entry, or 0."""
    match = _NUMBER_PREFIX.match(text or '')
    if match is None:
        return 0.0
    return float(match.group(1))


def round_half_up(value, places):
    # Halves round away from zero, so 6.25 shows as 6.3
    return float(Decimal(value).quantize(Decimal(places), rounding=ROUND_HALF_UP))


def win_rate(wins, total):
    return round_half_up(wins / total * 100, '0.1') if total else 0


def average_risk_reward(trades):
    if not trades:
        return 0
    # Unparseable entries still count toward the divisor
    return round_half_up(sum(parse_risk_reward(t.risk_reward) for t in trades) / len(trades), '0.01')


def bucket(key, trades):
    wins = sum(1 for t in trades if t.result is Result.WIN)
    return BucketStat(key=key, total=len(trades), wins=wins, win_rate=win_rate(wins, len(trades)))


def breakdown(trades, attr, values):
    """Per-value total/wins/win rate for every member of ``values``."""
    return [bucket(v.value, [t for t in trades if getattr(t, attr) is v]) for v in values]


def detail(key, trades, other_attr, other_values):
    stat = bucket(key, trades)
    return DetailStat(
        key=stat.key,
        total=stat.total,
        wins=stat.wins,
        win_rate=stat.win_rate,
        avg_risk_reward=average_risk_reward(trades),
        breakdown=breakdown(trades, other_attr, other_values),
    )


def month_label(day):
    return day.strftime('%b %Y')


def week_label(day):
    # Shift back to the Sunday that starts the week
    sunday = day - timedelta(days=(day.weekday() + 1) % 7)
    return f"{sunday.strftime('%b')} {sunday.day}"


def by_period(trades, label_for):
    periods = {}
    # Dicts keep insertion order, so buckets come out in first-appearance order
    for trade in trades:
        label = label_for(trade.date)
        period = periods.setdefault(label, PeriodStat(label))
        if trade.result is Result.WIN:
            period.wins += 1
        else:
            period.losses += 1
    return list(periods.values())


def compute_analytics(trades):
    """Compute the statistics snapshot for the full list of trades.

    Pure function of ``trades``: nothing is cached between calls and all
    dates come from the records themselves.
    """
    trades = list(trades)
    total = len(trades)
    wins = sum(1 for t in trades if t.result is Result.WIN)
    losses = sum(1 for t in trades if t.result is Result.LOSS)

    pair_stats = [stat for stat in breakdown(trades, 'pair', Pair) if stat.total > 0]

    setup_details = [detail(s.value, [t for t in trades if t.setup is s], 'pair', Pair)
                     for s in Setup]
    pair_details = []
    for pair in Pair:
        pair_trades = [t for t in trades if t.pair is pair]
        if pair_trades:
            pair_details.append(detail(pair.value, pair_trades, 'setup', Setup))

    return AnalyticsSnapshot(
        total_trades=total,
        wins=wins,
        losses=losses,
        win_rate=win_rate(wins, total),
        avg_risk_reward=average_risk_reward(trades),
        setup_stats=breakdown(trades, 'setup', Setup),
        pair_stats=pair_stats,
        setup_details=setup_details,
        pair_details=pair_details,
        monthly=by_period(trades, month_label),
        weekly=by_period(trades, week_label),
    )
