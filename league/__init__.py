"""ASL league engine: entities, store and competition state services."""
