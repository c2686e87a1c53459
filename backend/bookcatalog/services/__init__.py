# Services package init
"""
Book Catalog — Services Layer
===============================

Service Inventory:
    - BookService: validation, duplicate detection, checkout/check-in
      state machine and rating on top of a BookRepository
    - query_builder: query-string parameters → FindQuery
"""
