"""Infrastructure layer — database engine, schema, migrations, store.

This layer depends on stdlib and third-party libs (SQLAlchemy, Alembic).
It must never import from domain, services, interaction, commands, or output.
The service layer bridges between domain models and infrastructure rows.
"""
