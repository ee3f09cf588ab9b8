"""Channel Frame Schemas — validation of inbound channel payloads.

Invariants:
    - RegisterFrame requires a positive integer userId
    - SendFrame requires type == "message", userId, receiverId and a string content
    - Shape validation only: empty content is left to the persistence gateway,
      which rejects it with an error acknowledgment instead of a silent drop

Design Decisions:
    - camelCase aliases match the wire contract; populate_by_name lets Python
      callers use snake_case
    - strict ints: "1" is not a user id (JSON numbers only)
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class RegisterFrame(BaseModel):
    """Client → server registration ({"userId": n}); extra keys ignored."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    user_id: int = Field(alias="userId", gt=0, strict=True)


class SendFrame(BaseModel):
    """Client → server chat send."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    type: Literal["message"]
    user_id: int = Field(alias="userId", gt=0, strict=True)
    receiver_id: int = Field(alias="receiverId", gt=0, strict=True)
    content: str = Field(strict=True)
