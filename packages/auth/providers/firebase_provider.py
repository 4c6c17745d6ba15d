"""Firebase Auth provider implementation."""

from typing import Optional

import firebase_admin
from firebase_admin import auth as firebase_auth
from firebase_admin import credentials
from fastapi import HTTPException, status

from common.core.otel_axiom_exporter import trace_span, get_logger
from common.core.config import settings
from packages.auth.providers.interface import SSOProviderInterface
from packages.auth.providers.models import SSOProvider

logger = get_logger(__name__)

# Uses Workload Identity automatically on GKE
_firebase_app: Optional[firebase_admin.App] = None


def _get_firebase_app() -> firebase_admin.App:
    global _firebase_app
    if _firebase_app is None:
        project_id = settings.firebase_project_id or settings.google_project_id
        if not project_id:
            raise ValueError(
                "Firebase configuration missing: firebase_project_id or google_project_id required"
            )

        # Explicit credentials for local dev; ADC otherwise
        cred = None
        if settings.google_application_credentials:
            cred = credentials.Certificate(settings.google_application_credentials)

        _firebase_app = firebase_admin.initialize_app(
            credential=cred, options={"projectId": project_id}
        )
        logger.info(f"Firebase Admin SDK initialized for project: {project_id}")
    return _firebase_app


class FirebaseAuthProvider(SSOProviderInterface):
    def __init__(self):
        self.app = _get_firebase_app()

    def get_provider_name(self) -> SSOProvider:
        return SSOProvider.FIREBASE

    @trace_span
    async def get_provider_user_id_from_token(self, token: str) -> str:
        """Verify a Firebase ID token and return its UID."""
        try:
            decoded_token = firebase_auth.verify_id_token(token, app=self.app)
            uid = decoded_token.get("uid")
            if not uid:
                raise ValueError("Token missing 'uid' claim")
            return uid
        except firebase_auth.ExpiredIdTokenError:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Firebase token has expired",
            )
        except firebase_auth.InvalidIdTokenError as e:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=f"Invalid Firebase token: {str(e)}",
            )
        except Exception as e:
            logger.warning(f"Failed to extract Firebase UID: {e}")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Failed to extract user ID from Firebase token",
            )
