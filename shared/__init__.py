"""Shared models, configuration, errors and the JSON lookup client."""
