# Utils package init
"""
MediScan API: Utilities
========================

Stateless formatting and validation helpers (see formatting.py).
"""
