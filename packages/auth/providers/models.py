from enum import Enum


class SSOProvider(str, Enum):
    """Supported SSO providers"""

    FIREBASE = "firebase"
