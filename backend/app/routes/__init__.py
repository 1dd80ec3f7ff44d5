# Routes package init
"""
Tree Leaves Backend — API Routes Package
=========================================

What:  HTTP route handlers that accept requests and return responses.

Route Inventory:
    - leaves.py:  GET    /api/leaves          (list leaves)
                  POST   /api/leaves          (grow a leaf)
                  DELETE /api/leaves          (clear all leaves)
                  GET    /api/leaves/stats    (statistics)
    - health.py:  GET    /api/health          (aggregate health)
                  GET    /api/health/ready    (readiness probe)
                  GET    /api/health/live     (liveness probe)
    - pages.py:   GET    /, /thank-you        (HTML pages)

Routes stay thin: they read the request, call LeafService or the store,
and shape the {"success": ...} envelope. Business rules live in services.
"""
