"""Shared request parsing, response formatting, error classification and observability."""
