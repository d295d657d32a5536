"""Domain models, configuration, errors and the workflow service."""
