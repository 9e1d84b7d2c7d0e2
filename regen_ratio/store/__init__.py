"""
regen_ratio.store: Project / snapshot ownership and durable persistence.

Modules:
  backends       - KeyValueBackend ABC with in-memory, SQLite, and JSON-file
                   implementations.
  snapshot_store - SnapshotStore: CRUD over projects and snapshots, enforcing
                   invariants and persisting the full project list after
                   every mutation.
"""
