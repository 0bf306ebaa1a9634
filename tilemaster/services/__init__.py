"""
Service layer modules for the tilemaster data backend.

This module contains service implementations for:
- Remote (Supabase) and local fallback collection storage
- The collection sync engine (health check, load, save/reconcile)
- The application state holder driving the sync engine
- AI text generation for product copy and dashboard tips
"""

from .sync_engine import CollectionSync, HealthStatus, LoadedCollections, SaveMode, SaveOutcome, SyncEngine
from .app_state import AppState, InventoryMetrics, StartupStatus

__all__ = [
    'CollectionSync',
    'HealthStatus',
    'LoadedCollections',
    'SaveMode',
    'SaveOutcome',
    'SyncEngine',
    'AppState',
    'InventoryMetrics',
    'StartupStatus',
]
