"""Domain layer: histogram entities and the contracts the matcher consumes."""
