"""Shared fixtures for the performance module tests."""

from __future__ import annotations

import pandas as pd
import pytest

from copa_unique.performance.models import CurrentUser


@pytest.fixture()
def aliases() -> dict:
    """Small explicit alias table so tests never read the bundled JSON."""
    return {
        "cirurgia_plastica": "01 - CIRURGIA PLÁSTICA",
        "cirurgia plástica": "01 - CIRURGIA PLÁSTICA",
        "spa_estetica": "09 - SPA E ESTÉTICA",
        "luxskin": "Luxskin",
    }


@pytest.fixture()
def revenue_df() -> pd.DataFrame:
    """Sales across 2024 and 2025.

    March 2024: 2 sales, R$ 2.000
    March 2025: 2 sales, R$ 3.000
    2025 total: R$ 5.000 (Jan 1.500, Feb 500, Mar 3.000)
    """
    return pd.DataFrame([
        {'date': '2024-03-05', 'amount': 1000, 'department': 'cirurgia_plastica',
         'procedure_name': 'Rinoplastia', 'origin': 'Instagram',
         'attributed_to_user_id': 'u1', 'user_id': 'u9', 'team_id': 't1'},
        {'date': '2024-03-20', 'amount': 1000, 'department': 'spa_estetica',
         'procedure_name': 'Drenagem', 'origin': 'Google',
         'attributed_to_user_id': None, 'user_id': 'u2', 'team_id': 't1'},
        {'date': '2025-01-10', 'amount': 1500, 'department': '07 - ALREADY CODED',
         'procedure_name': 'Lipo', 'origin': 'Google',
         'attributed_to_user_id': 'u2', 'user_id': 'u2', 'team_id': 't2'},
        {'date': '2025-02-10', 'amount': 500, 'department': 'LuxSkin',
         'procedure_name': 'Peeling', 'origin': 'Google',
         'attributed_to_user_id': 'u1', 'user_id': 'u1', 'team_id': 't1'},
        {'date': '2025-03-10', 'amount': 2000, 'department': 'cirurgia_plastica',
         'procedure_name': 'Rinoplastia', 'origin': 'Instagram',
         'attributed_to_user_id': 'u1', 'user_id': 'u1', 'team_id': 't1'},
        {'date': '2025-03-15', 'amount': 1000, 'department': None,
         'procedure_name': 'Drenagem', 'origin': None,
         'attributed_to_user_id': None, 'user_id': 'u2', 'team_id': 't2'},
    ])


@pytest.fixture()
def executed_df() -> pd.DataFrame:
    return pd.DataFrame([
        {'date': '2025-03-12', 'amount': 1200, 'department': 'cirurgia_plastica',
         'procedure_name': 'Rinoplastia', 'executor_name': 'Dr. Paulo',
         'attributed_to_user_id': 'u1', 'user_id': 'u1', 'team_id': 't1'},
        {'date': '2025-03-18', 'amount': 300, 'department': 'spa_estetica',
         'procedure_name': 'Drenagem', 'executor_name': None,
         'attributed_to_user_id': None, 'user_id': 'u2', 'team_id': 't2'},
    ])


@pytest.fixture()
def admin_user() -> CurrentUser:
    return CurrentUser(user_id='u0', full_name='Gestora', role='admin')


@pytest.fixture()
def leader_user() -> CurrentUser:
    return CurrentUser(user_id='u1', full_name='Ana', role='lider', team_id='t1')


@pytest.fixture()
def seller_user() -> CurrentUser:
    return CurrentUser(user_id='u2', full_name='Bia', role='vendedor', team_id='t2')
