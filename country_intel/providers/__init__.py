"""Upstream data providers."""
