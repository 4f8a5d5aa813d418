# Services package init
"""
Blog API — Services Layer
===========================

What:  Data-access layer sitting between routes (HTTP) and the store.
How:   Services wrap an AsyncSession and return ORM objects or plain
       "not found" results; routes decide which HTTP answer that means.

Service Inventory:
    - BlogService: insert, list, get, author search, update-and-bump, delete
"""
