"""Infrastructure Layer — database sessions, object storage, logging setup.

Invariants:
    - Every external failure is mapped to a SidequestError subclass here
    - Singletons are created in the FastAPI lifespan, never at import time
"""
