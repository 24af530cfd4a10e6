"""Infrastructure layer: HTTP clients for external legal data providers."""
