# copa_unique/performance/__init__.py
"""
Performance Module

Metrics aggregation and rendering for every dashboard page.
All components are self-contained within this module.

Components:
- normalization: Department aliases and record cleanup
- bucketing, growth, ranking, seasonality, pace: Aggregation primitives
- pipeline, scoring, insights: Leads/RFV, league points, rule-based insights
- engine: MetricsEngine facade with memoization
- data_loader: Record set loading kept in session_state
- access_control: Role-based data access (admin/gerente/lider/vendedor)
- queries: Paginated record loading with caching
- filters: Sidebar filter components
- charts: Altair visualizations
- fragments: Streamlit rendering components
- export: Formatted Excel report generation

Usage:
    from copa_unique.performance import (
        AccessControl,
        RecordQueries,
        MetricsEngine,
        PerformanceFilters,
        PerformanceCharts,
        PerformanceExport,
    )
"""

from .access_control import AccessControl
from .queries import RecordQueries
from .engine import MetricsEngine
from .data_loader import RecordSetLoader
from .filters import PerformanceFilters, period_date_range
from .charts import PerformanceCharts
from .export import PerformanceExport
from .models import CurrentUser

# Constants
from .constants import (
    COLORS,
    MONTH_ORDER,
    FULL_ACCESS_ROLES,
    TEAM_ACCESS_ROLES,
    SELF_ACCESS_ROLES,
    ALLOWED_TOP_N,
    CHART_WIDTH,
    CHART_HEIGHT,
)

__all__ = [
    # Classes
    'AccessControl',
    'RecordQueries',
    'MetricsEngine',
    'RecordSetLoader',
    'PerformanceFilters',
    'PerformanceCharts',
    'PerformanceExport',
    'CurrentUser',
    'period_date_range',

    # Constants
    'COLORS',
    'MONTH_ORDER',
    'FULL_ACCESS_ROLES',
    'TEAM_ACCESS_ROLES',
    'SELF_ACCESS_ROLES',
    'ALLOWED_TOP_N',
    'CHART_WIDTH',
    'CHART_HEIGHT',
]

__version__ = '1.0.0'
