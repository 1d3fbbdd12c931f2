"""Domain layer — roster types, the assignment engine, and pure helpers.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, interaction, commands, or config.
"""
