"""
Configuration and environment setup.

This module contains:
- Environment-driven settings (Supabase, local storage, OpenAI, logging)
- Collection names, local storage keys and the Supabase setup SQL
"""

from .settings import Settings, get_settings
from .supabase_config import (
    COLLECTIONS,
    LOCAL_STORAGE_KEYS,
    SETUP_SQL,
    get_supabase_config,
    is_supabase_configured,
)

__all__ = [
    'Settings',
    'get_settings',
    'COLLECTIONS',
    'LOCAL_STORAGE_KEYS',
    'SETUP_SQL',
    'get_supabase_config',
    'is_supabase_configured',
]
