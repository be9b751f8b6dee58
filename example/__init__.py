"""Minimal HTTP handler that forwards request bodies to the provider."""
