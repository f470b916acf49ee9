# Middleware package init
"""
MediScan API: Middleware Package
=================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [CORS] → [Request ID] → [Logging] → [Auth Gate] → Route Handler

    1. CORS: FastAPI's CORSMiddleware, outermost so 401s carry CORS headers
    2. Request ID: correlation ID for logs and error bodies
    3. Logging: records the final status, including gate rejections
    4. Auth Gate: classifies the path and rejects missing identities (401)
"""
