"""Services Layer — transactional operations over the record store.

Invariants:
    - One service class per aggregate (profile lifecycle, reviews, invites, picks, collections)
    - Every public mutation runs inside services/transaction.atomic: one commit or none
    - Pure decisions live in core/; services only read, decide via core/, then write

Design Decisions:
    - Clock, code generator and account provider are injected, never imported, so tests
      drive time and external calls deterministically
"""
