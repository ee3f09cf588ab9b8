"""ORM Models — SQLAlchemy declarative models for all persisted entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Message and Notification are append-only; only `read` flips after insert

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from socialhub.models.user import User  # noqa: F401
from socialhub.models.post import Post  # noqa: F401
from socialhub.models.follow import Follow  # noqa: F401
from socialhub.models.message import Message  # noqa: F401
from socialhub.models.notification import Notification  # noqa: F401
