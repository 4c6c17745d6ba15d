"""
Generation API routes.

POST starts a session and answers 202 with the session id and progress
topic; the pipeline keeps running in the background.
"""

from typing import Optional
from fastapi import (
    APIRouter,
    Depends,
    File,
    Form,
    HTTPException,
    Request,
    UploadFile,
    status,
)
from fastapi.responses import JSONResponse

from common.core.config import settings
from common.core.exceptions import (
    CreditLedgerBusyError,
    InsufficientCreditsError,
    ValidationError,
)
from common.core.otel_axiom_exporter import get_logger
from common.providers.rate_limiter.limiter import limiter
from packages.auth.dependencies import get_current_active_user
from packages.auth.models.domain.authenticated_user import AuthenticatedUser
from packages.generation.models.domain.enums import GenerationDomain
from packages.generation.models.domain.request import GenerationRequest, ImageInput
from packages.generation.models.domain.session import GenerationSessionSnapshot
from packages.generation.models.schemas.generation import (
    GenerationAcceptedResponse,
    InsufficientCreditsResponse,
)
from packages.generation.progress.topics import build_topic
from packages.generation.services.orchestrator import (
    GenerationOrchestrator,
    get_orchestrator,
)

logger = get_logger(__name__)

router = APIRouter()


async def _read_image(image: Optional[UploadFile]) -> Optional[ImageInput]:
    if image is None or not image.filename:
        return None
    # Read one byte past the ceiling so oversized uploads are rejected without buffering them whole
    content = await image.read(settings.generation_image_max_bytes + 1)
    return ImageInput(
        content=content,
        content_type=image.content_type or "application/octet-stream",
        filename=image.filename,
    )


async def _start(
    domain: GenerationDomain,
    description: Optional[str],
    image: Optional[UploadFile],
    mature: bool,
    current_user: AuthenticatedUser,
    orchestrator: GenerationOrchestrator,
):
    request = GenerationRequest(
        requester_id=current_user.user_id,
        domain=domain,
        text=description,
        image=await _read_image(image),
        sensitive=mature,
    )

    try:
        session_id = await orchestrator.start(request)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except InsufficientCreditsError as e:
        return JSONResponse(
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            content=InsufficientCreditsResponse(
                required=e.required, available=e.available
            ).model_dump(),
        )
    except CreditLedgerBusyError as e:
        logger.warning(f"Ledger busy for user {current_user.user_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Another request is updating your credits, retry shortly",
        )

    return GenerationAcceptedResponse(
        session_id=session_id,
        topic=build_topic(domain, current_user.user_id, session_id),
    )


@router.post(
    "/characters",
    response_model=GenerationAcceptedResponse,
    response_model_by_alias=True,
    status_code=status.HTTP_202_ACCEPTED,
)
@limiter.limit(settings.generation_rate_limit)
async def generate_character(
    request: Request,
    description: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    mature: bool = Form(False),
    current_user: AuthenticatedUser = Depends(get_current_active_user),
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
):
    """Generate a character from a description and/or a reference image."""
    return await _start(
        GenerationDomain.CHARACTER, description, image, mature, current_user, orchestrator
    )


@router.post(
    "/stories",
    response_model=GenerationAcceptedResponse,
    response_model_by_alias=True,
    status_code=status.HTTP_202_ACCEPTED,
)
@limiter.limit(settings.generation_rate_limit)
async def generate_story(
    request: Request,
    description: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    mature: bool = Form(False),
    current_user: AuthenticatedUser = Depends(get_current_active_user),
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
):
    """Generate a story from a description and/or a scene image."""
    return await _start(
        GenerationDomain.STORY, description, image, mature, current_user, orchestrator
    )


@router.get(
    "/sessions/{session_id}",
    response_model=GenerationSessionSnapshot,
    response_model_by_alias=True,
)
async def get_session_status(
    session_id: str,
    current_user: AuthenticatedUser = Depends(get_current_active_user),
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
):
    """Polling view of an active session. Finished sessions are gone; use the entity."""
    snapshot = orchestrator.get_session_status(session_id, current_user.user_id)
    if snapshot is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return snapshot
