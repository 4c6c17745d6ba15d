from pydantic import BaseModel, ConfigDict


class AuthenticatedUser(BaseModel):
    """User context passed through authentication dependencies"""

    model_config = ConfigDict(from_attributes=True)

    # Firebase UID; also the credit account key and requester id
    user_id: str
