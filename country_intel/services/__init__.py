"""Core services: resolution, normalization, batching, derivations and the operation catalog."""
