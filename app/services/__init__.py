"""Clients for the external services SeerrFeed aggregates."""
