"""Infrastructure layer — relation store, repositories, graph export.

This layer depends on stdlib and third-party libs (SQLAlchemy, NetworkX).
It must never import from services, commands, or output.
"""
