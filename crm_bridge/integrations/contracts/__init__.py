"""Data shapes exchanged with the integrations layer."""
