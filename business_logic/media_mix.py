"""
Media mix simulation.

Forecasts per-channel budget, leads and funnel stages from a simulation
budget and the channel allocation table, and supports editing a channel's
absolute budget by deriving its allocation back from it.
"""

import logging
import math
import uuid
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Sequence

from models.data_models import CalculatedMetrics, MediaChannel, ViewMode
from .funnel_calculator import percent_of, plan_budget, safe_divide

logger = logging.getLogger(__name__)

ALLOCATION_TOLERANCE = 0.5

# Minimum difference, in currency units, for a manual budget to count as an override
OVERRIDE_EPSILON = 1.0

PRESET_CHANNELS = [
    "LinkedIn",
    "YouTube",
    "Print / Newspaper",
    "Hoardings / OOH",
    "Radio",
    "Channel Partners",
]


def default_media_plan() -> List[MediaChannel]:
    """The standard five-channel mix every new project starts with."""
    return [
        MediaChannel(id='fb', name='Meta (FB/Insta)', allocation_percent=40, estimated_cpl=4200,
                     capi_percent=35, capi_to_ap_percent=30, ap_to_ad_percent=50),
        MediaChannel(id='google', name='Google Search', allocation_percent=30, estimated_cpl=3800,
                     capi_percent=40, capi_to_ap_percent=35, ap_to_ad_percent=55),
        MediaChannel(id='display', name='Google Display', allocation_percent=10, estimated_cpl=2500,
                     capi_percent=20, capi_to_ap_percent=15, ap_to_ad_percent=30),
        MediaChannel(id='portals', name='Property Portals', allocation_percent=15, estimated_cpl=3200,
                     capi_percent=45, capi_to_ap_percent=40, ap_to_ad_percent=60),
        MediaChannel(id='native', name='Native / Others', allocation_percent=5, estimated_cpl=5500,
                     capi_percent=25, capi_to_ap_percent=20, ap_to_ad_percent=40),
    ]


@dataclass(frozen=True)
class ChannelForecast:
    """Forecasted budget and funnel stages for one channel."""
    channel_id: str
    name: str
    allocation_percent: float
    estimated_cpl: float
    budget: float
    leads: float
    qualified: float
    ap: float
    ad: float


@dataclass(frozen=True)
class MediaMixForecast:
    """Forecast of the whole channel table under one simulation budget."""
    sim_budget: float
    channels: List[ChannelForecast]
    total_budget: float
    total_leads: float
    total_qualified: float
    total_ap: float
    total_ad: float
    blended_cpl: float
    total_allocation: float
    allocation_valid: bool
    target_walkins: float = 0.0
    forecast_cpw: float = 0.0
    walkin_gap: float = 0.0
    walkin_coverage_percent: float = 0.0

    @property
    def walkins_covered(self) -> bool:
        return self.total_ad >= self.target_walkins

    def by_channel(self) -> Dict[str, ChannelForecast]:
        return {c.channel_id: c for c in self.channels}


def _percent_or_zero(value: Optional[float]) -> float:
    if value is None or math.isnan(value):
        return 0.0
    return value


def _allocation(channel: MediaChannel) -> float:
    return _percent_or_zero(channel.allocation_percent)


def walkin_coverage(forecast_ad: float, target_walkins: float) -> float:
    """Forecast AD as a percentage of the walk-in target, clamped to 0-100."""
    # A zero or undefined target is measured against one walk-in
    if not target_walkins or math.isnan(target_walkins):
        target_walkins = 1.0
    coverage = forecast_ad / target_walkins * 100
    if math.isnan(coverage):
        return 0.0
    return max(0.0, min(coverage, 100.0))


def resolve_simulation_budget(metrics: CalculatedMetrics,
                              view_mode: ViewMode,
                              manual_budget: Optional[float] = None) -> float:
    """
    Pick the budget the media mix is simulated against.

    Args:
        metrics: Calculated plan metrics
        view_mode: Brand uses the base budget, agency the all-in budget
        manual_budget: Operator override, used as-is when set

    Returns:
        Simulation budget in currency units
    """
    if manual_budget is not None:
        return manual_budget
    return plan_budget(metrics, view_mode)


def is_budget_overridden(manual_budget: Optional[float], calculated_budget: float) -> bool:
    """True when a manual budget is set and differs from the calculated one."""
    if manual_budget is None:
        return False
    return abs(manual_budget - calculated_budget) > OVERRIDE_EPSILON


def forecast_channel(channel: MediaChannel, sim_budget: float) -> ChannelForecast:
    budget = percent_of(sim_budget, _allocation(channel))
    cpl = channel.estimated_cpl
    # Zero, negative or missing CPL forecasts no leads
    leads = budget / cpl if cpl is not None and cpl > 0 else 0.0
    qualified = percent_of(leads, _percent_or_zero(channel.capi_percent))
    ap = percent_of(qualified, _percent_or_zero(channel.capi_to_ap_percent))
    ad = percent_of(ap, _percent_or_zero(channel.ap_to_ad_percent))

    return ChannelForecast(
        channel_id=channel.id,
        name=channel.name,
        allocation_percent=_allocation(channel),
        estimated_cpl=channel.estimated_cpl,
        budget=budget,
        leads=leads,
        qualified=qualified,
        ap=ap,
        ad=ad
    )


def forecast_media_mix(channels: Sequence[MediaChannel],
                       sim_budget: float,
                       tolerance: float = ALLOCATION_TOLERANCE,
                       target_walkins: float = 0.0) -> MediaMixForecast:
    """
    Forecast every channel and the table totals.

    Args:
        channels: Channel allocation table
        sim_budget: Budget being split across channels
        tolerance: Allowed deviation of the total allocation from 100
        target_walkins: Planned walk-ins the forecast AD is compared with

    Returns:
        MediaMixForecast
    """
    forecasts = [forecast_channel(c, sim_budget) for c in channels]

    total_budget = sum(f.budget for f in forecasts)
    total_leads = sum(f.leads for f in forecasts)
    total_ad = sum(f.ad for f in forecasts)
    total_allocation = sum(f.allocation_percent for f in forecasts)
    allocation_valid = abs(total_allocation - 100) <= tolerance

    if not allocation_valid:
        logger.warning(f"Channel allocation totals {total_allocation:.2f}%, expected 100%")

    return MediaMixForecast(
        sim_budget=sim_budget,
        channels=forecasts,
        total_budget=total_budget,
        total_leads=total_leads,
        total_qualified=sum(f.qualified for f in forecasts),
        total_ap=sum(f.ap for f in forecasts),
        total_ad=total_ad,
        blended_cpl=safe_divide(total_budget, total_leads),
        total_allocation=total_allocation,
        allocation_valid=allocation_valid,
        target_walkins=target_walkins,
        forecast_cpw=sim_budget / total_ad if total_ad > 0 else 0.0,
        walkin_gap=target_walkins - total_ad if total_ad < target_walkins else 0.0,
        walkin_coverage_percent=walkin_coverage(total_ad, target_walkins)
    )


def set_channel_budget(channels: Sequence[MediaChannel],
                       channel_id: str,
                       budget: float,
                       sim_budget: float) -> List[MediaChannel]:
    """
    Set a channel's absolute budget by rewriting its allocation percentage.

    The budget itself is never stored. With no simulation budget the edit
    is rejected and the channel list is returned unchanged.
    """
    if sim_budget <= 0:
        logger.warning(f"Ignoring budget edit for channel '{channel_id}': simulation budget is {sim_budget}")
        return list(channels)

    allocation = budget / sim_budget * 100
    return [
        replace(c, allocation_percent=allocation) if c.id == channel_id else c
        for c in channels
    ]


def new_channel_id() -> str:
    return f"custom_{uuid.uuid4().hex[:8]}"


def add_channel(channels: Sequence[MediaChannel],
                name: Optional[str] = None,
                channel_id: Optional[str] = None) -> List[MediaChannel]:
    """Append a custom channel with the default funnel chain and no allocation."""
    channel = MediaChannel(
        id=channel_id or new_channel_id(),
        name=name or "New Channel",
        is_custom=True
    )
    logger.info(f"Added channel '{channel.name}' ({channel.id})")
    return list(channels) + [channel]


def delete_channel(channels: Sequence[MediaChannel], channel_id: str) -> List[MediaChannel]:
    """Remove a channel. Unknown ids leave the list unchanged."""
    return [c for c in channels if c.id != channel_id]
