from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class GenerationAcceptedResponse(BaseModel):
    """202 body: where to follow the session."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    session_id: str
    topic: str


class InsufficientCreditsResponse(BaseModel):
    error: str = "insufficient_credits"
    required: int
    available: int
