"""Infrastructure Layer - database access, inventory store, logging setup.

Invariants:
    - Infrastructure never decides inventory outcomes (core/ does)
    - All database errors mapped to DatabaseError
"""
