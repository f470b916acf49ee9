# Schemas package init
"""
MediScan API: Response Schemas
===============================

Pydantic envelopes returned by the route handlers (see envelopes.py).
"""
