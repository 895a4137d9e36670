"""
Client-side sync subsystem.

Components:
- dates.py: local-date keys used for day grouping
- entity_store.py: task/note collections with optimistic updates and rollback
- pending_delete.py: two-tap delete confirmation with auto-expiry
- views.py: "today" / selected-date / calendar projections and dashboard stats
- refresh.py: cancellable scheduled refresh for an active view
"""
