"""Core domain types: exceptions and DTOs."""
