"""
Stats Query Backend Package.

FastAPI service layer that normalizes web analytics dashboard parameters into
resolved stats queries.

Subpackages:
    - api: FastAPI route handlers
    - core: Configuration, database, dependencies and errors
    - models: Pydantic schemas and enums
    - services: Query normalization, filters, imported data rules, comparisons,
      UTC boundaries, GA4 report requests
    - sql: Parameterized SQL queries
"""

__version__ = "1.0.0"
