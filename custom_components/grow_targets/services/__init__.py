"""Service handlers for Grow Targets."""
