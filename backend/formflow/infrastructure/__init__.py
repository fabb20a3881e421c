"""Infrastructure Layer — database engine and cross-cutting concerns.

Invariants:
    - Infrastructure never imports from core/ form logic (errors excepted)
    - All driver exceptions mapped to FormFlowError subclasses
"""
