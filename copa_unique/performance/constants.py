# copa_unique/performance/constants.py
"""
Constants for the Performance Module

Centralized configuration for:
- Role definitions
- Color schemes
- Month and quarter definitions
- Sentinels used when a record field is missing
- Insight and pace thresholds
- Gamification scoring table
"""

# =====================================================================
# ROLE DEFINITIONS
# =====================================================================

# Full access: can view every seller and team
FULL_ACCESS_ROLES = ['admin', 'gerente', 'coordenador']

# Team access: can view own team
TEAM_ACCESS_ROLES = ['lider']

# Self access: can only view own data
SELF_ACCESS_ROLES = ['vendedor', 'sdr', 'user']

# =====================================================================
# COLOR SCHEME
# =====================================================================

COLORS = {
    # Primary metrics
    "revenue": "#c9a227",              # Gold
    "executed": "#1f77b4",             # Blue
    "quantity": "#2ca02c",             # Green

    # Goals
    "meta1": "#d62728",                # Red
    "meta2": "#ff7f0e",                # Orange
    "meta3": "#9467bd",                # Purple
    "achievement_good": "#28a745",     # Green (≥100%)
    "achievement_bad": "#dc3545",      # Red (<100%)

    # YoY Comparison
    "current_year": "#1f77b4",         # Blue
    "previous_year": "#aec7e8",        # Light Blue
    "older_year": "#c7c7c7",           # Grey
    "yoy_positive": "#28a745",         # Green
    "yoy_negative": "#dc3545",         # Red

    # Misc
    "text_dark": "#333333",
    "text_light": "#666666",
    "grid": "#e0e0e0",
}

YEAR_COLORS = [COLORS["current_year"], COLORS["previous_year"], COLORS["older_year"]]

# =====================================================================
# MONTHS AND QUARTERS
# =====================================================================

MONTH_ORDER = [
    "Jan", "Fev", "Mar", "Abr", "Mai", "Jun",
    "Jul", "Ago", "Set", "Out", "Nov", "Dez"
]

MONTH_MAPPING = {i + 1: name for i, name in enumerate(MONTH_ORDER)}

FULL_MONTH_NAMES = {
    1: "Janeiro", 2: "Fevereiro", 3: "Março", 4: "Abril",
    5: "Maio", 6: "Junho", 7: "Julho", 8: "Agosto",
    9: "Setembro", 10: "Outubro", 11: "Novembro", 12: "Dezembro"
}

QUARTER_MONTHS = {
    1: [1, 2, 3],
    2: [4, 5, 6],
    3: [7, 8, 9],
    4: [10, 11, 12]
}

# =====================================================================
# SENTINELS
# =====================================================================

DEPARTMENT_SENTINEL = "Outros"
FIELD_SENTINEL = "Não informado"
EXECUTOR_SENTINEL = "Não identificado"
SELLER_SENTINEL = "Desconhecido"

# =====================================================================
# RECORD KINDS
# =====================================================================

RECORD_KINDS = ['revenue', 'executed', 'engagement', 'lead', 'cancellation', 'rfv']

# Text columns filled with FIELD_SENTINEL during normalization
TEXT_FIELDS = ['procedure_name', 'origin', 'patient_name', 'country']

# =====================================================================
# RANKING
# =====================================================================

ALLOWED_TOP_N = [5, 6, 8, 10]
DEFAULT_TOP_N = 10

RANKING_FIELDS = {
    'department': DEPARTMENT_SENTINEL,
    'procedure_name': FIELD_SENTINEL,
    'origin': FIELD_SENTINEL,
    'country': FIELD_SENTINEL,
    'executor_name': EXECUTOR_SENTINEL,
    'seller_id': SELLER_SENTINEL,
}

# =====================================================================
# PACE
# =====================================================================

# Share of the linear expectation used when counting business days
BUSINESS_DAY_FACTOR = 0.7

# Percent difference at or above which a value is considered on track
ON_TRACK_THRESHOLD = -10

# (lower bound, label, icon) checked top-down
PACE_LABELS = [
    (20, "Excelente", "🚀"),
    (10, "Acima", "📈"),
    (0, "No Ritmo", "✅"),
    (-10, "Atenção", "⚠️"),
    (-25, "Abaixo", "📉"),
]
PACE_LABEL_FLOOR = ("Crítico", "🔴")

# =====================================================================
# INSIGHT THRESHOLDS
# =====================================================================

DAILY_NEEDED_DANGER_RATIO = 1.5
YOY_SUCCESS_THRESHOLD = 20
AT_RISK_CUSTOMERS_THRESHOLD = 20
MOM_THRESHOLD = 10
AVG_TICKET_GROWTH_THRESHOLD = 5
QUANTITY_GROWTH_THRESHOLD = 10
TREND_BAND_PP = 5

LEAD_WON_STATUSES = ['ganho', 'operou']
HOT_TEMPERATURE = 'hot'

CANCELLATION_RETAINED = 'retained'
CANCELLATION_CANCELLED = ['cancelled_with_fine', 'cancelled_no_fine']

RFV_AT_RISK_SEGMENTS = ['Em Risco', 'Não Podem Perder']
RFV_CHAMPIONS_SEGMENT = 'Campeões'

# =====================================================================
# GAMIFICATION SCORING
# =====================================================================

REVENUE_POINTS_DIVISOR = 1000

NPS_PROMOTER_MIN = 9
NPS_POINTS = 5
NPS_CITED_POINTS = 10

TESTIMONIAL_POINTS = {
    'google': 10,
    'video': 30,
    'gold': 50,
}

REFERRAL_POINTS = {
    'collected': 5,
    'to_consultation': 20,
    'to_surgery': 50,
}

OTHER_INDICATOR_POINTS = {
    'ambassadors': 50,
    'unilovers': 30,
    'instagram_mentions': 5,
}

CARD_POINTS = {
    'blue': 20,
    'white': 10,
    'yellow': -15,
    'red': -40,
}

ENGAGEMENT_KINDS = ['nps', 'testimonial', 'referral', 'other_indicator']

# =====================================================================
# ENGINE
# =====================================================================

ENGINE_CACHE_SIZE = 128

# =====================================================================
# CHART SETTINGS
# =====================================================================

CHART_WIDTH = 700
CHART_HEIGHT = 350

# =====================================================================
# EXCEL EXPORT
# =====================================================================

EXCEL_STYLES = {
    "header_fill_color": "1f4e79",
    "header_font_color": "FFFFFF",
    "currency_format": '"R$" #,##0',
    "percent_format": '0.0"%"',
    "date_format": 'DD/MM/YYYY',
}
