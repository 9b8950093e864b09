"""Stateless helpers: HTTP transport, permission matrix, messages, input checks."""
