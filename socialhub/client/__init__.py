"""Client Reconciliation Layer — consumer-side cache, channel and REST client.

Invariants:
    - The conversation view is the single source for what a client renders
    - Pushed and fetched copies of the same message collapse to one entry by id

Design Decisions:
    - asyncio throughout, mirroring the server: one task owns the channel
"""
