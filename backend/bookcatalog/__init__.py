"""
Book Catalog — Application Package
====================================

A REST service managing a library catalog of books with checkout/check-in
state and ratings, stored in MongoDB.

    ┌─────────────────────────────────────┐
    │     Routes (routes/books.py)        │  ← HTTP decoding, status codes
    ├─────────────────────────────────────┤
    │  BookService (services/)            │  ← validation, duplicates,
    │                                     │    checkout/check-in, rating
    ├─────────────────────────────────────┤
    │  BookRepository (repositories/)     │  ← MongoDB queries, error
    │                                     │    translation
    ├─────────────────────────────────────┤
    │  AsyncMongoClient (database.py)     │  ← created in the app lifespan
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
