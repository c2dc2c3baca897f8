from pydantic import BaseModel
from typing import Optional


class OwnerSummary(BaseModel):
    id: int
    first_name: str
    last_name: str
    email: str
    phone_number: Optional[str] = None

    model_config = {"from_attributes": True}
