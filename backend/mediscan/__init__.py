"""
MediScan API: Application Package
==================================

What: HTTP layer of the MediScan medical-imaging service.
Who:  Imported by uvicorn (``mediscan.main:app``), pytest and the route modules.

Layout:

    ┌─────────────────────────────────────┐
    │   Middleware (request ID, logging,  │  ← runs on every request
    │   auth gate)                        │
    ├─────────────────────────────────────┤
    │           Routes (API Layer)        │  ← authenticate, call, envelope
    ├─────────────────────────────────────┤
    │   Services (document store, AI      │  ← thin adapters to collaborators
    │   health assistant, identity)       │
    ├─────────────────────────────────────┤
    │   access / utils                    │  ← pure functions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
