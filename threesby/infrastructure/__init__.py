"""Infrastructure Layer — database sessions, logging, clock, code generation, auth client.

Invariants:
    - Implements the Protocols declared in core/boundary_protocols.py
    - Third-party failures mapped to ThreesbyError subclasses before leaving this package
"""
