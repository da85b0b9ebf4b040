"""Profile editor API: Google sign-in and schema-tolerant user profiles."""
