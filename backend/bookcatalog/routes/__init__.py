# Routes package init
"""
Book Catalog — API Routes Package
===================================

Route Inventory:
    - books.py:   /books CRUD, checkout/checkin, rating
    - health.py:  GET /health (document store connectivity)

Routes stay thin: they decode input, call BookService, and return the
success response. Error-to-status mapping lives in main.py.
"""
