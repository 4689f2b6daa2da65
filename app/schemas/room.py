from typing import Optional

from pydantic import BaseModel, ConfigDict


class RoomResponse(BaseModel):
    room_id: int
    room_number: str
    building: Optional[str] = None
    capacity: int
    current_occupants: int

    model_config = ConfigDict(from_attributes=True)
