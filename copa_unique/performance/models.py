# copa_unique/performance/models.py
"""
Record and result types for the Performance Module.

Input records mirror the backend tables and are read-only. Derived types are
rebuilt from scratch on every computation and never persisted.
"""

from dataclasses import dataclass, field, asdict
from datetime import date
from typing import Dict, List, Optional

from .constants import MONTH_MAPPING


# =====================================================================
# INPUT RECORDS
# =====================================================================

@dataclass(frozen=True)
class RevenueRecord:
    """One sale."""
    date: date
    amount: float
    department: Optional[str] = None
    procedure_name: Optional[str] = None
    origin: Optional[str] = None
    patient_name: Optional[str] = None
    attributed_to_user_id: Optional[str] = None
    user_id: Optional[str] = None
    team_id: Optional[str] = None
    country: Optional[str] = None


@dataclass(frozen=True)
class ExecutedRecord:
    """Execution of a sold procedure. Linked to sales only loosely."""
    date: date
    amount: float
    department: Optional[str] = None
    procedure_name: Optional[str] = None
    origin: Optional[str] = None
    patient_name: Optional[str] = None
    attributed_to_user_id: Optional[str] = None
    user_id: Optional[str] = None
    team_id: Optional[str] = None
    country: Optional[str] = None
    executor_name: Optional[str] = None


@dataclass(frozen=True)
class EngagementRecord:
    date: date
    kind: str
    user_id: Optional[str] = None
    team_id: Optional[str] = None
    points: float = 0


@dataclass(frozen=True)
class Lead:
    created_at: date
    status: Optional[str] = None
    temperature: Optional[str] = None


@dataclass(frozen=True)
class Cancellation:
    request_date: date
    status: Optional[str] = None
    contract_value: float = 0


@dataclass(frozen=True)
class RFVSegmentRow:
    segment: str
    total_value: float = 0


@dataclass(frozen=True)
class CurrentUser:
    """Identity injected into access-controlled code."""
    user_id: Optional[str]
    full_name: str
    role: str
    team_id: Optional[str] = None


# =====================================================================
# DERIVED RESULTS
# =====================================================================

@dataclass
class MonthlyBucket:
    year: int
    month: int
    revenue: float = 0.0
    executed: float = 0.0
    qtd_sold: int = 0
    qtd_executed: int = 0

    @property
    def key(self) -> str:
        return month_key(self.year, self.month)

    @property
    def avg_ticket_sold(self) -> float:
        return self.revenue / self.qtd_sold if self.qtd_sold > 0 else 0.0

    @property
    def avg_ticket_executed(self) -> float:
        return self.executed / self.qtd_executed if self.qtd_executed > 0 else 0.0

    def to_dict(self) -> Dict:
        data = asdict(self)
        data['avg_ticket_sold'] = self.avg_ticket_sold
        data['avg_ticket_executed'] = self.avg_ticket_executed
        return data


@dataclass
class DepartmentBucket:
    year: int
    department: str
    revenue: float = 0.0
    executed: float = 0.0
    qtd_sold: int = 0
    qtd_executed: int = 0
    share_percent: float = 0.0

    @property
    def avg_ticket(self) -> float:
        return self.revenue / self.qtd_sold if self.qtd_sold > 0 else 0.0


@dataclass
class ComparisonRow:
    """Same calendar month across consecutive years, newest first."""
    month: int
    years: List[int]
    revenue: List[float]
    executed: List[float]
    qtd_sold: List[int]
    revenue_growth: float = 0.0
    executed_growth: float = 0.0
    quantity_growth: float = 0.0

    @property
    def month_name(self) -> str:
        return MONTH_MAPPING[self.month]

    @property
    def current_revenue(self) -> float:
        return self.revenue[0]

    @property
    def compare_revenue(self) -> float:
        return self.revenue[1] if len(self.revenue) > 1 else 0.0


@dataclass
class RankingEntry:
    name: str
    count: int = 0
    revenue: float = 0.0


@dataclass
class QuarterSummary:
    year: int
    quarter: int
    revenue: float = 0.0
    executed: float = 0.0
    growth: float = 0.0

    @property
    def label(self) -> str:
        return f"Q{self.quarter}"


@dataclass
class YearTotals:
    year: int
    revenue: float = 0.0
    executed: float = 0.0
    qtd_sold: int = 0
    qtd_executed: int = 0

    @property
    def avg_ticket(self) -> float:
        return self.revenue / self.qtd_sold if self.qtd_sold > 0 else 0.0


@dataclass
class Insight:
    kind: str       # success | warning | danger | info
    message: str
    icon: str = ""
    rule: str = ""


@dataclass
class SellerInsight:
    user_id: str
    name: str
    status: str     # achieved | danger | warning | on-track
    sold: float
    goal: float
    percent: float
    remaining: float
    daily_needed: float
    suggestion: str


@dataclass
class TeamScore:
    team_id: str
    team_name: str
    revenue: float = 0.0
    revenue_points: int = 0
    quality_points: float = 0.0
    modifier_points: float = 0.0
    details: Dict[str, float] = field(default_factory=dict)

    @property
    def total_points(self) -> float:
        return self.revenue_points + self.quality_points + self.modifier_points


def month_key(year: int, month: int) -> str:
    """Bucket key for a calendar month, e.g. '2025-3'."""
    return f"{int(year)}-{int(month)}"
