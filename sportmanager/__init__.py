"""
Sport Manager - Match Roster & Lifecycle Service

Responsibilities:
- Match registry (create, cancel, restore, delete)
- Roster admission with capacity and identity checks
- Per-match atomic mutations under concurrent requests
- Roster events for interested listeners
"""
