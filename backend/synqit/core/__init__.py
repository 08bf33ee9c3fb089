# synqit/core/__init__.py
"""
Core application modules.
Contains essential infrastructure components:
- bootstrap: Startup housekeeping (expired session sweep)
- db: Database handle, connection retry and health monitor
- errors: AppError and the exception handlers producing the JSON envelope
- notifications: Outbound notification sinks
- rate_limit: In-memory per-client rate limiting
- responses: Success envelope and serialization helpers
- security: Password hashing, JWT and one-time tokens
- storage: Image storage for uploads
"""
