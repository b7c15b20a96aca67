"""Services Layer — imperative shell around the governance core.

Invariants:
    - Services load snapshots through readers, call pure core functions, then persist
    - Audit entries are written after the primary commit, never inside it
    - Derived state (weights, equity) is refreshed only through RecomputePipeline

Design Decisions:
    - One service per aggregate (ledger, proposal, voting, committee, rule change)
"""
