"""CleanTask accounts API: registration, JWT authentication and role-gated administration."""

__version__ = "0.1.0"
