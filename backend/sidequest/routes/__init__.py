# Routes package init
"""
Side Quest Backend — API Routes Package
=========================================

Route Inventory:
    - health.py:  GET    /health
    - polish.py:  POST   /polish
    - cards.py:   GET    /cards
                  POST   /cards
                  DELETE /cards/{id}
                  DELETE /cards/cleanup/expired

Routes stay thin: parse the request, call a service, return a schema.
Errors propagate to the global handlers registered in main.py.
"""
