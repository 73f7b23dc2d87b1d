"""
HTTP layer.

``router`` aggregates the per‑domain routers found in ``endpoints``;
``responses`` builds the uniform envelopes every handler returns.
"""
