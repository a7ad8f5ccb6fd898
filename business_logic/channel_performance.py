"""
Per-channel funnel performance from reported stage counts.
"""

import logging
from dataclasses import dataclass, fields
from typing import Dict, List, Sequence

from models.data_models import ChannelPerformance, MediaChannel
from .funnel_calculator import safe_divide

logger = logging.getLogger(__name__)

COUNT_FIELDS = [f.name for f in fields(ChannelPerformance) if f.name != 'channel_id']


@dataclass(frozen=True)
class ChannelPerformanceRow:
    """Display spend, stage counts and cost per stage for one channel (or the total)."""
    channel_id: str
    name: str
    spends: float
    leads: float
    open_attempted: float
    contacted: float
    assigned_to_sales: float
    ap: float
    ad: float
    bookings: float
    lost: float
    cpl: float
    cp_qualified: float
    cp_ap: float
    cp_ad: float
    stage_percentages: Dict[str, float]


@dataclass(frozen=True)
class ChannelPerformanceReport:
    rows: List[ChannelPerformanceRow]
    totals: ChannelPerformanceRow


def _build_row(channel_id: str, name: str, counts: Dict[str, float], tax_multiplier: float) -> ChannelPerformanceRow:
    spends = counts['spends'] * tax_multiplier
    leads = counts['leads']

    stage_percentages = {
        stage: safe_divide(counts[stage], leads) * 100
        for stage in ('open_attempted', 'contacted', 'assigned_to_sales', 'ap', 'ad', 'lost')
    }

    return ChannelPerformanceRow(
        channel_id=channel_id,
        name=name,
        spends=spends,
        leads=leads,
        open_attempted=counts['open_attempted'],
        contacted=counts['contacted'],
        assigned_to_sales=counts['assigned_to_sales'],
        ap=counts['ap'],
        ad=counts['ad'],
        bookings=counts['bookings'],
        lost=counts['lost'],
        cpl=safe_divide(spends, leads),
        cp_qualified=safe_divide(spends, counts['assigned_to_sales']),
        cp_ap=safe_divide(spends, counts['ap']),
        cp_ad=safe_divide(spends, counts['ad']),
        stage_percentages=stage_percentages
    )


def aggregate_channel_performance(channels: Sequence[MediaChannel],
                                  records: Sequence[ChannelPerformance],
                                  tax_multiplier: float = 1.0) -> ChannelPerformanceReport:
    """
    Compute cost per funnel stage for every channel and for the whole table.

    Args:
        channels: Channels of the project, in display order
        records: Sparse performance records; a channel without one counts as all zeros
        tax_multiplier: Applied to stored (base) spend for display

    Returns:
        ChannelPerformanceReport whose totals sum the counts and recompute the
        cost metrics from those sums
    """
    by_channel = {r.channel_id: r for r in records}
    totals = {name: 0.0 for name in COUNT_FIELDS}
    rows = []

    for channel in channels:
        record = by_channel.get(channel.id)
        counts = {name: (getattr(record, name) or 0.0) if record else 0.0 for name in COUNT_FIELDS}
        for name in COUNT_FIELDS:
            totals[name] += counts[name]
        rows.append(_build_row(channel.id, channel.name, counts, tax_multiplier))

    return ChannelPerformanceReport(
        rows=rows,
        totals=_build_row('total', 'Total', totals, tax_multiplier)
    )
