"""
API package containing versioned routes.

A version subpackage such as ``v1`` exposes a top-level ``router``
that includes all of its domain-specific endpoints.
"""
