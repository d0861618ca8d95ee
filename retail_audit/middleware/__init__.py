"""ASGI middleware helpers."""
