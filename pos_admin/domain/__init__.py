"""Domain layer: framework-independent entities and exceptions."""
