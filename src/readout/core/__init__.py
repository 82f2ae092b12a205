"""Shared plumbing: configuration, logging and error types."""
