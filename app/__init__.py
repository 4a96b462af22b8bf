"""
Student Records API
REST backend for admin and student records with JWT auth.

Architecture:
- MongoDB: users (credentials, roles) and students (optionally owned by a user)
- FastAPI: routes, dependency-injected access control
"""

__version__ = "1.0.0"
