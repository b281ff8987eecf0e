"""Domain layer — name codec, graph model, date parsing.

This layer depends only on the standard library.
It must never import from services, infrastructure, commands, or config.
"""
