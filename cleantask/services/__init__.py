"""Business logic for accounts and authentication."""
