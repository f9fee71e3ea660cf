"""Domain layer: timer lifecycle, command schemas, and normalization.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, commands, or config.
"""
