"""
Schemas module - Request/Response schemas for API endpoints.

Request schemas double as the validators for admin and student payloads
(create / update variants); response schemas never carry password hashes.
"""
