from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class UserResponse(BaseModel):
    id: UUID
    email: str
    display_name: Optional[str] = None
    role: str

    model_config = ConfigDict(
        json_schema_extra={
            'example': {
                'id': '0190f5a4-6c1e-7a51-9d7c-3b0f3f2a9a10',
                'email': 'participant@example.com',
                'display_name': 'Pat Participant',
                'role': 'participant',
            }
        }
    )
