# copa_unique/__init__.py
"""
Shared Package for the Copa Unique League Dashboard

This package contains common utilities shared across all pages:
- auth: Session management from forwarded identity headers
- config: Configuration management (local + Streamlit Cloud)
- db: Database connection management with pooling and paginated reads

Usage:
    from copa_unique.auth import AuthManager
    from copa_unique.db import fetch_all_paginated
    from copa_unique.config import config

    # Or import commonly used items directly
    from copa_unique import AuthManager, config
"""

# Authentication
from .auth import (
    AuthManager,
    identity_from_headers,
    require_login,
    require_roles,
)

# Configuration
from .config import (
    config,
    Config,
    IS_RUNNING_ON_CLOUD,
    APP_CONFIG,
)

# Database
from .db import (
    RecordFetchError,
    get_db_engine,
    set_db_engine,
    check_db_connection,
    reset_db_engine,
    get_connection,
    execute_query,
    execute_query_df,
    fetch_all_paginated,
)

__all__ = [
    # Auth
    'AuthManager',
    'identity_from_headers',
    'require_login',
    'require_roles',

    # Config
    'config',
    'Config',
    'IS_RUNNING_ON_CLOUD',
    'APP_CONFIG',

    # Database
    'RecordFetchError',
    'get_db_engine',
    'set_db_engine',
    'check_db_connection',
    'reset_db_engine',
    'get_connection',
    'execute_query',
    'execute_query_df',
    'fetch_all_paginated',
]

__version__ = '1.0.0'
