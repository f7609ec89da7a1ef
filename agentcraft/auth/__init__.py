"""Authentication: password hashing, JWT sessions and password reset tokens."""
