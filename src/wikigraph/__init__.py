"""wikigraph — bounded relation-graph exploration over an encyclopedia triple store."""

__version__ = "0.1.0"
