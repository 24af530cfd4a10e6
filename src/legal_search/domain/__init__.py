"""Domain layer: entities shared by adapters, aggregator and API."""
