"""Services Layer — persistence gateway and delivery router.

Invariants:
    - Services receive their collaborators (DB session, registry) explicitly
    - Persistence always completes before any delivery attempt

Design Decisions:
    - One service per component for locality (gateway = storage, router = fan-out)
"""
