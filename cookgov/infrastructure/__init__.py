"""Infrastructure Layer — database access, SQL readers and logging.

Invariants:
    - Infrastructure may read core snapshot types but holds no governance rules
    - Database errors are mapped to DatabaseError before leaving this layer

Design Decisions:
    - SQL readers implement core/repository_protocols structurally (no inheritance)
"""
