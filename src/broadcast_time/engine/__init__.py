"""Core reconciliation engine and broadcast time store.

Contains:
- BroadcastTimeStore: atomic in-memory slot for the last broadcast pair
- TimeReconciliationEngine: effective time decision policy
- BroadcastAuthority: holder for the "broadcast is authoritative" flag
"""

from .broadcast_time_store import BroadcastTimeStore
from .reconciliation_engine import BroadcastAuthority, TimeReconciliationEngine

__all__ = ['BroadcastTimeStore', 'BroadcastAuthority', 'TimeReconciliationEngine']
