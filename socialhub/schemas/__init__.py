"""Pydantic Schemas — request and channel-frame validation.

Invariants:
    - Schemas validate at system boundary (REST bodies, channel frames)

Design Decisions:
    - Separate from models: schemas are wire contracts, models are persistence
"""
