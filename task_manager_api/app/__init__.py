"""
Application package initializer.

The project is organised into layers: ``schemas`` validate input,
``repositories`` talk to the database, ``services`` apply business
rules and ``api`` exposes them over HTTP.
"""

from .main import app  # noqa: F401
