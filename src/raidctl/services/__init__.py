"""Service layer — persistence operations returning ServiceResult.

Services may import from domain and infrastructure layers.
They must never import from interaction, commands, or output.
"""
