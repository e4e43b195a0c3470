# =============================================================================
# tracker_core/__init__.py
# Offline-first sync core for the time tracker
# =============================================================================
"""
tracker_core - local-first persistence and background sync of time Entries
and planned Shifts against a Supabase backend.

Usage:
------
from tracker_core.offline import create_time_tracker

service = create_time_tracker()
"""

__version__ = "0.1.0"
