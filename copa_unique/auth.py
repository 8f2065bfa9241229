# copa_unique/auth.py
"""
Session Identity Manager for Streamlit Apps

Version: 1.0.0
Features:
- Reads the identity forwarded by the auth proxy (request headers)
- Falls back to an identity already stored in session state
- Session management with timeout
- Builds the CurrentUser passed explicitly to AccessControl

Passwords are never handled here: the backend auth service issues sessions,
and this app only consumes the identity it forwards.
"""

import streamlit as st
from datetime import datetime, timedelta
from typing import Dict, Optional, List, Mapping
from functools import wraps
import logging

from .config import config
from .performance.models import CurrentUser

logger = logging.getLogger(__name__)

# Headers set by the auth proxy in front of the app
IDENTITY_HEADERS = {
    'user_id': 'X-Forwarded-User-Id',
    'full_name': 'X-Forwarded-User-Name',
    'role': 'X-Forwarded-User-Role',
    'team_id': 'X-Forwarded-Team-Id',
}

SESSION_KEYS = [
    'authenticated', 'user_id', 'user_fullname',
    'user_role', 'team_id', 'login_time', 'debug_mode',
    '_copa_record_set',
]


def identity_from_headers(headers: Mapping[str, str]) -> Optional[Dict]:
    """
    Extract the forwarded identity from request headers.

    Header lookup is case-insensitive. Returns None when the user id header
    is absent or blank.
    """
    lowered = {str(k).lower(): v for k, v in dict(headers or {}).items()}

    def _get(field: str) -> Optional[str]:
        value = lowered.get(IDENTITY_HEADERS[field].lower())
        if value is None:
            return None
        value = str(value).strip()
        return value or None

    user_id = _get('user_id')
    if not user_id:
        return None

    return {
        'user_id': user_id,
        'full_name': _get('full_name') or user_id,
        'role': (_get('role') or 'user').lower(),
        'team_id': _get('team_id'),
    }


class AuthManager:
    """Session identity manager for Streamlit apps"""

    def __init__(self):
        self.session_timeout = timedelta(
            hours=config.get_app_setting("SESSION_TIMEOUT_HOURS", 8)
        )

    # ==================== SESSION MANAGEMENT ====================

    def check_session(self) -> bool:
        """Check if a forwarded identity is present and the session is not expired"""
        if not st.session_state.get('authenticated'):
            identity = self._read_forwarded_identity()
            if identity is None:
                return False
            self.login(identity)

        # Check session timeout
        login_time = st.session_state.get('login_time')
        if login_time:
            elapsed = datetime.now() - login_time
            if elapsed > self.session_timeout:
                logger.info(f"Session expired for user: {st.session_state.get('user_id')}")
                self.logout()
                return False

        return True

    def _read_forwarded_identity(self) -> Optional[Dict]:
        """Identity forwarded by the auth proxy for the current request"""
        try:
            headers = st.context.headers
        except AttributeError:
            return None
        return identity_from_headers(headers)

    def login(self, identity: Dict):
        """Initialize user session from a forwarded identity"""
        st.session_state.authenticated = True
        st.session_state.user_id = identity['user_id']
        st.session_state.user_fullname = identity.get('full_name') or identity['user_id']
        st.session_state.user_role = identity.get('role') or 'user'
        st.session_state.team_id = identity.get('team_id')
        st.session_state.login_time = datetime.now()

        st.session_state.debug_mode = config.is_feature_enabled("DEBUG_MODE")

        logger.info(f"User {identity['user_id']} ({st.session_state.user_role}) session started")

    def logout(self):
        """Clear user session and cache"""
        user_id = st.session_state.get('user_id', 'Unknown')

        for key in SESSION_KEYS:
            if key in st.session_state:
                del st.session_state[key]

        st.cache_data.clear()

        logger.info(f"User {user_id} session cleared")

    # ==================== ACCESS CONTROL ====================

    def require_auth(self) -> bool:
        """
        Require an identity to access a page
        Use at the beginning of each protected page
        """
        if not self.check_session():
            st.warning("⚠️ Sessão não encontrada. Faça login pelo portal da clínica.")
            st.stop()
            return False
        return True

    def require_role(self, allowed_roles: List[str]) -> bool:
        """
        Require specific role(s) to access a page

        Usage:
            auth.require_role(['admin', 'gerente'])
        """
        if not self.require_auth():
            return False

        current_role = st.session_state.get('user_role', '')

        if current_role not in allowed_roles:
            st.error(f"🚫 Acesso negado. Perfis permitidos: {', '.join(allowed_roles)}")
            st.stop()
            return False

        return True

    # ==================== USER INFO HELPERS ====================

    def get_user_display_name(self) -> str:
        """Get user's display name for UI"""
        return st.session_state.get('user_fullname') or st.session_state.get('user_id', 'Usuário')

    def get_current_user(self) -> CurrentUser:
        """Current identity as a CurrentUser"""
        return CurrentUser(
            user_id=st.session_state.get('user_id'),
            full_name=self.get_user_display_name(),
            role=st.session_state.get('user_role', 'user'),
            team_id=st.session_state.get('team_id'),
        )


# ==================== DECORATORS ====================

def require_login(func):
    """Decorator to require a session for a function"""
    @wraps(func)
    def wrapper(*args, **kwargs):
        auth = AuthManager()
        if auth.require_auth():
            return func(*args, **kwargs)
    return wrapper


def require_roles(*roles):
    """Decorator to require specific roles"""
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            auth = AuthManager()
            if auth.require_role(list(roles)):
                return func(*args, **kwargs)
        return wrapper
    return decorator


# ==================== MODULE EXPORTS ====================

__all__ = [
    'AuthManager',
    'identity_from_headers',
    'require_login',
    'require_roles',
]
