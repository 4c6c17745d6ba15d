from packages.generation.models.domain.enums import GenerationDomain


def build_topic(domain: GenerationDomain, requester_id: str, session_id: str) -> str:
    """Progress topic, e.g. ``story-generation:u1:abc``."""
    return f"{domain.value}-generation:{requester_id}:{session_id}"
