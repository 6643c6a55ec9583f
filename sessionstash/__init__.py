"""
sessionstash - Server-side sessions for FastAPI/Starlette handlers

Issues a session identifier, keeps the session's data bag in Redis and
resolves it again from a cookie or form field on later requests.

Architecture:
- Each module is self-contained with clear interfaces
- Modules are completely replaceable
- No module knows the internals of another
- All communication through defined interfaces

Modules:
- storage: Cache store abstraction (Redis)
- sequence: Unique sequence source for identifiers
- session: Session records, typed values and lifecycle management
- middleware: Request/response carrier and FastAPI dependencies
- api: HTTP models for the reference service
"""

__version__ = "1.0.0"
