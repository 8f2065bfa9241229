# copa_unique/config.py
"""
Centralized Configuration Management

Version: 1.0.0
Features:
- Support both local (.env) and Streamlit Cloud (secrets.toml)
- Singleton pattern for efficiency
- Type-safe getters with defaults
- Environment detection
"""

import os
import logging
from pathlib import Path
from dotenv import load_dotenv
from typing import Dict, Any, Optional
from dataclasses import dataclass
from datetime import datetime
from zoneinfo import ZoneInfo

# Initialize logger
logger = logging.getLogger(__name__)


def is_running_on_streamlit_cloud() -> bool:
    """Detect if running on Streamlit Cloud"""
    try:
        import streamlit as st
        return hasattr(st, 'secrets') and len(st.secrets) > 0
    except Exception:
        return False


@dataclass
class DatabaseConfig:
    """Database configuration container"""
    host: str
    port: int
    user: str
    password: str
    database: str
    driver: str = "postgresql+psycopg2"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'driver': self.driver,
            'host': self.host,
            'port': self.port,
            'user': self.user,
            'password': self.password,
            'database': self.database
        }

    def is_configured(self) -> bool:
        return bool(self.host and self.user and self.password)


class Config:
    """
    Centralized configuration management

    Usage:
        from copa_unique.config import config

        # Get database config
        db_config = config.get_db_config()

        # Get app settings
        page_size = config.get_app_setting("FETCH_PAGE_SIZE", 1000)

        # Check feature flags
        if config.is_feature_enabled("EXPORT"):
            ...
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self.is_cloud = is_running_on_streamlit_cloud()
        self._load_config()
        self._initialized = True

    def _load_config(self):
        """Load configuration based on environment"""
        if self.is_cloud:
            self._load_cloud_config()
        else:
            self._load_local_config()

        self._load_app_config()
        self._log_config_status()

    def _load_cloud_config(self):
        """Load configuration from Streamlit Cloud secrets"""
        import streamlit as st

        db_secrets = st.secrets.get("DB_CONFIG", {})
        self._db_config = DatabaseConfig(
            host=db_secrets.get("host", ""),
            port=int(db_secrets.get("port", 5432)),
            user=db_secrets.get("user", ""),
            password=db_secrets.get("password", ""),
            database=db_secrets.get("database", "postgres"),
            driver=db_secrets.get("driver", "postgresql+psycopg2")
        )

        # Cloud secrets override selected app settings via the environment
        for key, value in dict(st.secrets.get("APP", {})).items():
            os.environ.setdefault(key, str(value))

        logger.info("☁️ Running in STREAMLIT CLOUD")

    def _load_local_config(self):
        """Load configuration from local .env file"""
        env_paths = [
            Path.cwd() / ".env",
            Path(__file__).parent.parent / ".env",
        ]

        for env_path in env_paths:
            if env_path.exists():
                load_dotenv(env_path)
                logger.info(f"Loaded .env from: {env_path}")
                break

        self._db_config = DatabaseConfig(
            host=os.getenv("DB_HOST", ""),
            port=int(os.getenv("DB_PORT", "5432")),
            user=os.getenv("DB_USER", ""),
            password=os.getenv("DB_PASSWORD", ""),
            database=os.getenv("DB_NAME", os.getenv("DB_DATABASE", "postgres")),
            driver=os.getenv("DB_DRIVER", "postgresql+psycopg2")
        )

        logger.info("💻 Running in LOCAL environment")

    def _load_app_config(self):
        """Load application-specific settings"""
        self._app_config = {
            # Session
            "SESSION_TIMEOUT_HOURS": int(os.getenv("SESSION_TIMEOUT_HOURS", "8")),

            # Database pool
            "DB_POOL_SIZE": int(os.getenv("DB_POOL_SIZE", "5")),
            "DB_POOL_RECYCLE": int(os.getenv("DB_POOL_RECYCLE", "3600")),

            # Record fetching
            "FETCH_PAGE_SIZE": int(os.getenv("FETCH_PAGE_SIZE", "1000")),

            # Cache
            "CACHE_TTL_SECONDS": int(os.getenv("CACHE_TTL_SECONDS", "300")),

            # Localization
            "TIMEZONE": os.getenv("TIMEZONE", "America/Sao_Paulo"),

            # Clinic-wide monthly goals (fallback when department_goals is empty)
            "CLINIC_META_1": float(os.getenv("CLINIC_META_1", "2500000")),
            "CLINIC_META_2": float(os.getenv("CLINIC_META_2", "2700000")),
            "CLINIC_META_3": float(os.getenv("CLINIC_META_3", "3000000")),

            # Department alias table (JSON); empty means the bundled table
            "DEPARTMENT_ALIASES_PATH": os.getenv("DEPARTMENT_ALIASES_PATH", ""),

            # Feature flags
            "ENABLE_EXPORT": os.getenv("ENABLE_EXPORT", "true").lower() == "true",
            "ENABLE_DEBUG_MODE": os.getenv("ENABLE_DEBUG_MODE", "false").lower() == "true",
        }

    def _log_config_status(self):
        """Log configuration status"""
        if self._db_config.is_configured():
            logger.info(f"✅ Database: {self._db_config.host}/{self._db_config.database}")
        else:
            logger.warning("⚠️ Database: not configured")
        aliases = self._app_config.get("DEPARTMENT_ALIASES_PATH")
        logger.info(f"✅ Department aliases: {aliases or 'bundled table'}")

    # ==================== PUBLIC GETTERS ====================

    def get_db_config(self) -> Dict[str, Any]:
        """
        Get database configuration as dictionary.

        Raises:
            ValueError: if host, user or password is missing
        """
        if not self._db_config.is_configured():
            logger.error("Missing required database configuration")
            raise ValueError("Missing required database configuration. Please check .env file.")
        return self._db_config.to_dict()

    def get_app_setting(self, key: str, default: Any = None) -> Any:
        """Get application setting with default"""
        return self._app_config.get(key, default)

    def get_clinic_goals(self) -> Dict[str, float]:
        """Clinic-wide Meta 1/2/3 values"""
        return {
            'meta1': self._app_config["CLINIC_META_1"],
            'meta2': self._app_config["CLINIC_META_2"],
            'meta3': self._app_config["CLINIC_META_3"],
        }

    def get_department_aliases_path(self) -> Optional[str]:
        """Override path for the department alias table, if any"""
        return self._app_config.get("DEPARTMENT_ALIASES_PATH") or None

    def now(self) -> datetime:
        """Current time in the clinic timezone (naive, for day arithmetic)"""
        return datetime.now(ZoneInfo(self._app_config["TIMEZONE"])).replace(tzinfo=None)

    def is_feature_enabled(self, feature: str) -> bool:
        """Check if feature is enabled"""
        key = f"ENABLE_{feature.upper()}"
        return self._app_config.get(key, True)

    # ==================== PROPERTIES ====================

    @property
    def app_config(self) -> Dict[str, Any]:
        """Copy of all application settings"""
        return self._app_config.copy()


# ==================== SINGLETON INSTANCE ====================

config = Config()

IS_RUNNING_ON_CLOUD = config.is_cloud
APP_CONFIG = config.app_config

__all__ = [
    'config',
    'Config',
    'DatabaseConfig',
    'IS_RUNNING_ON_CLOUD',
    'APP_CONFIG',
]
