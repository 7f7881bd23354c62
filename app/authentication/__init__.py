"""
Authentication application.

Identity for the chat backend: registration, email/password login with
JWT issuance, and the user directory used for existence checks and search.

Key components:
    - User model: Custom email-based user
    - AuthService: Register and login
    - UserService: Lookup by id, batch existence checks, search

Usage:
    from authentication.models import User
    from authentication.services import AuthService, UserService
"""
