"""
Service layer.

Each service encapsulates the business logic of one domain and is used
by the API handlers.  Services signal failures with built-in
exceptions (``ValueError``, ``LookupError``, ``PermissionError``) that
the handlers translate into HTTP status codes.
"""
