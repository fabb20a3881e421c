"""Services Layer — pipeline controller and persistence adapters.

Invariants:
    - Services orchestrate IO around pure core decisions
    - Repositories are the only code that touches ORM models for writes

Design Decisions:
    - Controller depends on the ProductRepository protocol, not the SQL adapter (ADR: testable shell)
"""
