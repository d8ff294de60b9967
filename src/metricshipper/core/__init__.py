"""Core engine: models, ports, coercion, batching and export drivers."""
