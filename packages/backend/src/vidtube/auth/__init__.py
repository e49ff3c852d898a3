"""Authentication and authorization.

Learn: Users log in with username/email + password and receive a JWT
access/refresh pair. Access tokens authenticate requests; refresh tokens
are single-use and persisted on the user so a superseded one is rejected.
"""
