"""Command-line host for the MapCanvas renderer."""
