# Routes package init
"""
Workbench Backend: API Routes Package
======================================

Route Inventory:
    - resources.py:  router factory; one router per resource
                     (/datasets, /models, /experiments, /notebooks)
    - health.py:     GET /health (service health check)

Routes are THIN: they read path/header/body, call a service, and set status
codes and headers. Errors are rendered by the global handlers in main.py.
"""
