"""Infrastructure layer — the per-shape decoded tag cache.

It may import from domain (plans and decoding) but never from services,
commands, or output.
"""
