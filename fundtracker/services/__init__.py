"""Business logic for investments and exits."""
