"""Python client for the DormGuard API: HTTP client, polling cache and poller."""

from .api_client import APIError, DormGuardClient
from .data_store import (
    ALL_COLLECTIONS,
    LOGS,
    ROOMS,
    TENANTS,
    VISITORS,
    DataStore,
    SyncResult,
    collections_for_role,
    describe_time_since_sync,
)
from .poller import DataStorePoller

__all__ = [
    "APIError",
    "DormGuardClient",
    "DataStore",
    "DataStorePoller",
    "SyncResult",
    "ALL_COLLECTIONS",
    "VISITORS",
    "LOGS",
    "TENANTS",
    "ROOMS",
    "collections_for_role",
    "describe_time_since_sync",
]
