"""Business logic and data access for preferences."""
