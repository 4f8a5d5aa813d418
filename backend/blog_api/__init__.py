"""
Blog API — Application Package Initializer
============================================

What: A small CRUD HTTP API over a single collection of blog posts.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, id parsing, 404s
    ├─────────────────────────────────────┤
    │     Services (Data-Access Layer)    │  ← BlogService store operations
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Database: engine, sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
