"""Nominal interfaces shared across the gateway."""
