"""Framework adapters for graphrest."""
