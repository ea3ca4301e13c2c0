"""
Pydantic schema definitions for API payloads.

Request models forbid unknown fields; read models mirror the stored
documents after ``serialize_document`` has turned ObjectIds into
strings.
"""
