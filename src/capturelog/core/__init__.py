"""Core domain: models, normalization, write path and fan-out."""
