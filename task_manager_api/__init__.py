"""
Top‑level package for the Task Manager API.

All functionality lives in submodules under ``app``; the ASGI
application is importable as ``task_manager_api.app.main:app``.
"""

__all__ = []
