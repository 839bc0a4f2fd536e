"""Competition state services: fixtures, standings, overrides, scorers, live matches."""
