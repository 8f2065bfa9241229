# app.py
"""
Copa Unique League Dashboard - Main Entry Point

Landing page with the clinic's strategic overview for the current month:
goal progress, pace and rule-based insights.

Version: 1.0.0
"""

import streamlit as st
import logging

from copa_unique.auth import AuthManager
from copa_unique.config import config
from copa_unique.db import check_db_connection, RecordFetchError
from copa_unique.performance import AccessControl, RecordQueries, RecordSetLoader, period_date_range
from copa_unique.performance.fragments import render_goal_progress, render_pace_badge, render_insights
from copa_unique.performance.constants import FULL_MONTH_NAMES
from copa_unique.performance.pipeline import active_campaigns

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# ==================== PAGE CONFIGURATION ====================

APP_NAME = "Copa Unique League"
APP_ICON = "🏆"
APP_VERSION = "1.0.0"

st.set_page_config(
    page_title=f"{APP_NAME} - Unique",
    page_icon=APP_ICON,
    layout="wide",
    initial_sidebar_state="expanded"
)

# ==================== CUSTOM CSS ====================

st.markdown("""
<style>
    .main-header {
        font-size: 2.5rem;
        font-weight: bold;
        margin-bottom: 0.5rem;
        color: #b8860b;
    }

    .sub-header {
        font-size: 1.1rem;
        color: #666;
        margin-bottom: 2rem;
    }

    .footer {
        text-align: center;
        color: #888;
        padding: 1rem;
        margin-top: 3rem;
        border-top: 1px solid #eee;
        font-size: 0.9rem;
    }
</style>
""", unsafe_allow_html=True)

# ==================== INITIALIZATION ====================

auth = AuthManager()

# ==================== HELPER FUNCTIONS ====================

def show_no_session_page():
    """Shown when the auth proxy forwarded no identity"""
    st.markdown(f'<p class="main-header">{APP_ICON} {APP_NAME}</p>', unsafe_allow_html=True)
    st.markdown('<p class="sub-header">Painel comercial da clínica</p>', unsafe_allow_html=True)
    st.warning("⚠️ Sessão não encontrada.")
    st.info("Acesse o painel pelo portal da clínica para iniciar a sessão.")


def show_strategic_overview():
    """Current month goals, pace and insights for the viewer's scope"""
    now = config.now()
    year, month = now.year, now.month

    access = AccessControl(auth.get_current_user())
    queries = RecordQueries(access)
    start_date, end_date = period_date_range(year, month, years_back=1)

    try:
        data = RecordSetLoader(queries).load(start_date, end_date, include_pipeline=True)
        goals = queries.get_clinic_goals(year, month)
    except RecordFetchError as e:
        st.error(f"❌ Erro ao carregar dados: {e}")
        logger.exception("Error loading strategic overview")
        st.stop()

    engine = data['engine']
    st.markdown(f"### 📊 Visão estratégica · {FULL_MONTH_NAMES[month]} {year}")

    progress = engine.goal_progress(year, month, goals, now)
    render_goal_progress(progress, goals)
    render_pace_badge(engine.pace(goals['meta1'], year, month, now))

    render_insights(engine.insights(
        year, month, goals, now, active_campaigns=active_campaigns(data['campaigns'], now)
    ))


def show_main_app():
    """Display the main application for an identified user"""

    with st.sidebar:
        st.markdown(f"### 👤 {auth.get_user_display_name()}")

        access_level = AccessControl(auth.get_current_user()).get_access_level()
        if access_level == 'full':
            st.success("🔓 Acesso completo")
        elif access_level == 'team':
            st.info("👥 Acesso da equipe")
        else:
            st.warning("👤 Visão pessoal")

        st.caption(f"Perfil: {st.session_state.get('user_role', 'user')}")
        st.markdown("---")

        if st.button("🔄 Atualizar dados", use_container_width=True):
            RecordSetLoader.clear_cache()
            st.cache_data.clear()
            st.rerun()

        if st.button("🚪 Sair", use_container_width=True):
            auth.logout()
            st.rerun()

    st.markdown(f'<p class="main-header">{APP_ICON} {APP_NAME}</p>', unsafe_allow_html=True)
    st.markdown(
        f'<p class="sub-header">Olá, {auth.get_user_display_name()}! '
        f'Escolha um painel no menu lateral.</p>',
        unsafe_allow_html=True
    )

    db_ok, db_error = check_db_connection()
    if not db_ok:
        st.error(f"⚠️ {db_error}")
        st.info("Verifique a conexão com o banco de dados ou contate o suporte.")
        return

    show_strategic_overview()

    st.markdown(f"""
    <div class="footer">
        <strong>{APP_NAME}</strong> v{APP_VERSION} | Unique Clínica
    </div>
    """, unsafe_allow_html=True)


# ==================== MAIN ====================

def main():
    """Main application entry point"""
    if not auth.check_session():
        show_no_session_page()
    else:
        show_main_app()


if __name__ == "__main__":
    main()
