"""Graph export helpers backed by NetworkX."""
