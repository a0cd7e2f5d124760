# Routes package init
"""
Los Inmaduros Backend — API Routes Package
===========================================

Route Inventory:
    - route_catalog.py:  GET  /api/routes, /api/routes/{slug}
    - route_calls.py:    /api/route-calls (create, list, detail, update,
                         cancel, delete)
    - attendances.py:    /api/route-calls/{id}/attendances,
                         /api/attendances/my-attendances
    - reviews.py:        /api/routes/{id}/reviews, /api/reviews/{id}
    - favorites.py:      /api/routes/{id}/favorites, /api/favorites
    - photos.py:         /api/photos (upload, galleries, moderation)
    - auth.py:           /api/auth/me, /api/auth/test-token (non-production)
    - config.py:         GET /api/config
    - files.py:          GET /api/files/{path} (local storage backend)
    - health.py:         GET /health

Routes stay thin: parse the request, call a service, wrap the result in
the response envelope.
"""
