"""Business modules for docqa.

This package contains the core business logic modules, organized
following the modular monolith pattern. Each module is self-contained
with its own schemas, services, and domain logic.
"""
