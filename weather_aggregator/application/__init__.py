"""
Application Layer

Use cases and DTOs. Depends on the domain layer only.
"""
