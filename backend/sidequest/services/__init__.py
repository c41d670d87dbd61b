"""Services Layer — async orchestration of core rules around the database.

Invariants:
    - Each mutating method owns its transaction: commit at the end, rollback on any exception
    - Services never import from api/ (routes call services, not the reverse)

Design Decisions:
    - One service class per component for locality (assignment, submission,
      belief ledger, status projection, proof reads, catalog)
"""
