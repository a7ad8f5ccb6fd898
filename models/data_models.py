"""
Core data models for the EstateFlow campaign planner.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


# Crore to currency units
CRORE = 10_000_000

CAMPAIGN_WEEKS = 13


class ViewMode(Enum):
    """Spend presentation: base media cost or cost including agency fee/tax."""
    BRAND = "BRAND"
    AGENCY = "AGENCY"


class ProjectStatus(Enum):
    """Lifecycle status of a campaign project."""
    PLANNING = "Planning"
    ACTIVE = "Active"
    COMPLETED = "Completed"


class DeliveryStatus(Enum):
    """Three-tier classification of a delivery percentage."""
    GOOD = "good"
    WARNING = "warning"
    CRITICAL = "critical"


@dataclass
class PlanningData:
    """Business plan inputs. BV and ATS are in Crore, CPL and budgets in currency units."""
    overall_bv: float
    ats: float
    digital_contribution_percent: float
    presales_contribution_percent: float
    ltw_percent: float
    wtb_percent: float
    cpl: float
    tax_percent: float
    received_budget: float = 0.0


@dataclass(frozen=True)
class CalculatedMetrics:
    """Annual targets derived from a PlanningData."""
    total_units: float
    digital_units: float
    presales_units: float
    digital_bv: float
    presales_bv: float
    target_walkins: float
    target_leads: float
    base_budget: float
    tax_amount: float
    all_in_budget: float
    cpw: float
    cpb: float
    revenue: float
    target_com: float


@dataclass
class WeeklyData:
    """One campaign week: editable distribution inputs plus derived targets."""
    id: int
    week_label: str
    date_range: str
    spend_distribution: float = 0.0
    lead_distribution: float = 0.0
    ad_conversion: float = 0.0
    leads: float = 0.0
    cumulative_leads: float = 0.0
    ap: float = 0.0
    cumulative_ap: float = 0.0
    ad: float = 0.0
    cumulative_ad: float = 0.0
    spends_base: float = 0.0
    spends_all_in: float = 0.0


@dataclass
class WeeklyActuals:
    """Reported actuals for one week. None means the metric was not reported."""
    week_id: int
    leads: Optional[float] = None
    ap: Optional[float] = None
    ad: Optional[float] = None
    spends: Optional[float] = None  # always base (pre-tax)
    bookings: Optional[float] = None
    presales_bookings: Optional[float] = None


@dataclass
class MediaChannel:
    """A media channel in the simulation with its funnel conversion chain."""
    id: str
    name: str
    allocation_percent: float = 0.0
    estimated_cpl: float = 0.0
    capi_percent: float = 30.0
    capi_to_ap_percent: float = 30.0
    ap_to_ad_percent: float = 50.0
    is_custom: bool = False


@dataclass
class ChannelPerformance:
    """Actual funnel-stage counts for one channel."""
    channel_id: str
    spends: float = 0.0
    leads: float = 0.0
    open_attempted: float = 0.0
    contacted: float = 0.0
    assigned_to_sales: float = 0.0
    ap: float = 0.0
    ad: float = 0.0
    bookings: float = 0.0
    lost: float = 0.0


@dataclass
class Poc:
    """Single point of contact assigned to projects."""
    id: str
    name: str


@dataclass
class Project:
    """Aggregate root owning the plan, calendar, channels and actuals of one campaign."""
    id: str
    name: str
    plan: PlanningData
    weeks: List[WeeklyData]
    location: str = ""
    poc: str = ""
    status: ProjectStatus = ProjectStatus.PLANNING
    other_spends: float = 0.0
    manual_media_budget: Optional[float] = None
    media_plan: List[MediaChannel] = field(default_factory=list)
    actuals: Dict[int, WeeklyActuals] = field(default_factory=dict)
    channel_performance: List[ChannelPerformance] = field(default_factory=list)
    is_locked: bool = False


@dataclass(frozen=True)
class ReportingWindow:
    """Inclusive range of week indices used for period reporting."""
    start_week: int
    end_week: int
    empty: bool = False

    def contains(self, week_id: int) -> bool:
        if self.empty:
            return False
        return self.start_week <= week_id <= self.end_week

    @classmethod
    def full_campaign(cls, week_count: int = CAMPAIGN_WEEKS) -> "ReportingWindow":
        return cls(start_week=0, end_week=week_count - 1)
