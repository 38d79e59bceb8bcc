"""Server — ASGI gateway and response sending."""
