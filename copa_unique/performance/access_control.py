# copa_unique/performance/access_control.py
"""
Role-based Access Control for Performance Views

Handles data access permissions based on the user's role:
- admin/gerente/coordenador: Full access to every seller and team
- lider: Access to own team (team_id)
- vendedor/sdr/user: Access to own data only

The current user is always passed in explicitly; nothing here reads
session state.
"""

import logging
from typing import List, Optional

import pandas as pd

from .constants import FULL_ACCESS_ROLES, TEAM_ACCESS_ROLES
from .models import CurrentUser

logger = logging.getLogger(__name__)


class AccessControl:
    """
    Manage data access based on user role and team.

    Usage:
        access = AccessControl(auth.get_current_user())

        # Get access level
        level = access.get_access_level()  # 'full', 'team', or 'self'

        # Filter a dataframe
        filtered_df = access.filter_dataframe(revenue_df, 'seller_id')
    """

    def __init__(self, current_user: CurrentUser):
        """
        Initialize access control.

        Args:
            current_user: Identity of the viewer
        """
        self.user = current_user
        self.user_role = (current_user.role or '').lower()

        logger.info(f"AccessControl initialized: role={self.user_role}, user_id={current_user.user_id}")

    # =========================================================================
    # ACCESS LEVEL DETERMINATION
    # =========================================================================

    def get_access_level(self) -> str:
        """
        Determine access level based on role.

        Returns:
            'full' - Can view every seller
            'team' - Can view own team
            'self' - Can view own data only
        """
        if self.user_role in [r.lower() for r in FULL_ACCESS_ROLES]:
            return 'full'
        elif self.user_role in [r.lower() for r in TEAM_ACCESS_ROLES]:
            return 'team'
        else:
            return 'self'

    def can_view_all(self) -> bool:
        """Check if user has full access to all data."""
        return self.get_access_level() == 'full'

    def can_select_seller(self) -> bool:
        """Check if user can select other sellers (not self-only)."""
        return self.get_access_level() != 'self'

    # =========================================================================
    # DATA FILTERING
    # =========================================================================

    def filter_dataframe(
        self,
        df: pd.DataFrame,
        user_id_col: str = 'seller_id',
        team_id_col: str = 'team_id'
    ) -> pd.DataFrame:
        """
        Filter DataFrame to the rows the user may see.

        Args:
            df: DataFrame to filter
            user_id_col: Column holding the attributed user id
            team_id_col: Column holding the team id

        Returns:
            Filtered DataFrame (empty when the user has no id for its level)
        """
        if df is None or df.empty:
            return df

        level = self.get_access_level()
        if level == 'full':
            return df

        if level == 'team':
            if not self.user.team_id:
                logger.warning("Team access without team_id, returning empty DataFrame")
                return df.head(0)
            if team_id_col not in df.columns:
                logger.warning(f"Column '{team_id_col}' not found in DataFrame")
                return df.head(0)
            filtered = df[df[team_id_col].astype(str) == str(self.user.team_id)]
        else:
            if not self.user.user_id:
                logger.warning("Self access without user_id, returning empty DataFrame")
                return df.head(0)
            if user_id_col not in df.columns:
                logger.warning(f"Column '{user_id_col}' not found in DataFrame")
                return df.head(0)
            filtered = df[df[user_id_col].astype(str) == str(self.user.user_id)]

        logger.debug(f"Filtered DataFrame ({level}): {len(df)} -> {len(filtered)} rows")
        return filtered

    # =========================================================================
    # PERMISSION CHECKS
    # =========================================================================

    def validate_selected_sellers(
        self,
        selected_ids: List[str],
        profiles: Optional[pd.DataFrame] = None
    ) -> List[str]:
        """
        Keep only the selected seller ids the user may access.

        Args:
            selected_ids: Seller ids picked in the UI
            profiles: Profiles with user_id and team_id (needed for team access)
        """
        level = self.get_access_level()
        if level == 'full':
            return list(selected_ids)

        if level == 'team' and profiles is not None and not profiles.empty:
            team = profiles[profiles['team_id'].astype(str) == str(self.user.team_id)]
            allowed = set(team['user_id'].astype(str))
        else:
            allowed = {str(self.user.user_id)} if self.user.user_id else set()

        valid_ids = [sid for sid in selected_ids if str(sid) in allowed]
        if len(valid_ids) < len(selected_ids):
            logger.warning(
                f"Some selected sellers were filtered out: "
                f"selected={len(selected_ids)}, valid={len(valid_ids)}"
            )
        return valid_ids

    def __repr__(self) -> str:
        return (
            f"AccessControl(role='{self.user_role}', "
            f"user_id={self.user.user_id}, "
            f"level='{self.get_access_level()}')"
        )
