"""
Core infrastructure: settings, logging, security and the MongoDB client.
"""
