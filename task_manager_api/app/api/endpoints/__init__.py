"""
Domain‑specific endpoint modules (users, tasks, health).

Each module exposes a ``router`` that is included by ``api.router``.
"""
