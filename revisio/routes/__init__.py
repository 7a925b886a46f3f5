# Routes package init
"""
Revisio Backend — API Routes Package
=====================================

Route Inventory:
    - revision.py: POST /api/extract                  (stage 1 only)
                   POST /api/supplement               (stage 2 only)
                   POST /api/revision-sheets          (full pipeline, JSON)
                   POST /api/revision-sheets/upload   (full pipeline, multipart)
    - health.py:   GET  /health                       (service health check)

Routes are thin: they extract data from the request, call a service, and
pick the status code. Pipeline logic belongs in services.
"""
