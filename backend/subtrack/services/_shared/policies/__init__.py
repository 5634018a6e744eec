"""Authorization predicates shared across services."""
