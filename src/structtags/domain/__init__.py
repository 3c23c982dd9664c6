"""Domain layer — grammar, literal conversion, resolvers, plans, decoding.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, commands, or config.
"""
