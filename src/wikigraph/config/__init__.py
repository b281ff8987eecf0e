"""Configuration: settings models, file discovery, logging setup."""
