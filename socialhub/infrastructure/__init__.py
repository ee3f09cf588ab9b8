"""Infrastructure Layer — database sessions, logging, live connection registry.

Invariants:
    - Infrastructure never imports from services/ or api/
    - SQLAlchemy failures are mapped to PersistenceError before leaving this layer
"""
