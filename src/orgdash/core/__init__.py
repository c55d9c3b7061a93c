"""Core infrastructure: errors, logging and the GraphQL transport."""
