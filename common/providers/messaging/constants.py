"""Constants for messaging system."""

from enum import StrEnum


class QueueName(StrEnum):
    """Queue names for the messaging system."""

    # Consumed by the image rendering backend
    IMAGE_GENERATION = "image_generation"
