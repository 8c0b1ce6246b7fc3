"""Shared infrastructure: settings, logging, database and observability."""
