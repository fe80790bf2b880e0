"""Core: configuration, domain models, contracts and the lint pipeline."""
