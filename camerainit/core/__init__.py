"""Core camera initialization: models, resolvers, grouping, rigs, pipeline."""
