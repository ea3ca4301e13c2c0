"""
Service layer.

Each service is a class of classmethods encapsulating the business
rules of one domain.  Services obtain their repository through the
``repository_factory`` class attribute, so tests can replace it with
a mock without touching MongoDB.
"""
