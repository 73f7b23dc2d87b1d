"""
Data access layer.

Each repository wraps the SQL for one table and returns schema
objects.  Shared pagination, filter and sort mechanics live in
``base``; repositories compose those helpers instead of inheriting
from a common class.
"""
