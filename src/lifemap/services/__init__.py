"""Service layer for Lifemap operations.

- events: journal entries and chunked item storage
- mappings: tag mapping snapshots and updates
- connections: SQLite connection store
- imports: watch-history and journal import pipelines
- analytics: per-owner analytics facade
"""
