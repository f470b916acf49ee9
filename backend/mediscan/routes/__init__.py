# Routes package init
"""
MediScan API: Routes Package
=============================

Route Inventory:
    - analytics.py:    GET  /api/analytics/mongo
    - health_query.py: POST /api/health-query
    - billing.py:      GET  /api/payments/history
                       GET  /api/subscription/status
    - reports.py:      GET  /api/reports/mongo
                       GET  /api/reports/user
                       GET  /api/user-data
    - diagnostics.py:  GET  /api/test-mongo
    - leaderboard.py:  GET  /api/leaderboard/doctors
    - health.py:       GET  /health

Every handler has the same shape: take the caller identity, make at most one
collaborator call, return an envelope. Errors are raised and rendered by the
global exception handlers in main.py.
"""
