"""Services Layer - policy handlers, policy dispatch, order processor, notifications.

Invariants:
    - Handlers apply decisions computed by core/fulfillment_rules.py
    - Policy dispatch uses an explicit registration list (no auto-discovery)
"""
