"""Routing algorithms: candidate path generation, model building and solution mapping."""
