"""
Service layer abstraction.

Each service encapsulates the business rules of one domain and talks
to storage only through the repositories, so API handlers never touch
SQL directly.
"""
