# Repositories package init
"""
Book Catalog — Storage Gateway Layer
======================================

    - base.py:             BookRepository (abstract contract)
    - book_repository.py:  MongoBookRepository (pymongo async collection)
"""
