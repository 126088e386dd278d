"""Domain models, errors and identity for the Job Board."""
