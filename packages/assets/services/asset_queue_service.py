"""
Fire-and-forget hand-off to the image rendering backend.

The caller never waits for the render; it only learns whether the job was
accepted by the broker.
"""

from typing import Optional

from common.core.exceptions import EnqueueError
from common.core.otel_axiom_exporter import trace_span, get_logger
from common.core.security import generate_job_id
from common.providers.messaging.constants import QueueName
from common.providers.messaging.factory import get_message_queue
from common.providers.messaging.interface import MessageQueueInterface
from common.providers.messaging.messages import AssetGenerationMessage
from packages.assets.models.domain.asset_job import AssetJob

logger = get_logger(__name__)


class AssetQueueService:
    def __init__(self, message_queue: Optional[MessageQueueInterface] = None):
        self.message_queue = message_queue or get_message_queue()

    @trace_span
    async def enqueue(self, job: AssetJob) -> str:
        """
        Publish a render job.

        Returns:
            The job id

        Raises:
            EnqueueError: the broker did not accept the message
        """
        job_id = generate_job_id(job.generation_type.value)
        message = AssetGenerationMessage(
            job_id=job_id,
            generation_type=job.generation_type.value,
            user_id=job.user_id,
            entity_id=job.entity_id,
            session_id=job.session_id,
            prompt=job.prompt,
            reference_image_url=job.reference_image_url,
            priority=job.priority,
        )

        try:
            published = await self.message_queue.publish(
                QueueName.IMAGE_GENERATION,
                message.model_dump(mode="json"),
                priority=job.priority,
            )
        except Exception as e:
            logger.error(f"Asset job {job_id} publish raised: {e}")
            raise EnqueueError(f"Failed to queue {job.generation_type.value} job") from e

        if not published:
            logger.error(f"Asset job {job_id} was not accepted by the broker")
            raise EnqueueError(f"Failed to queue {job.generation_type.value} job")

        logger.info(
            f"Queued {job.generation_type.value} job {job_id} for entity {job.entity_id}",
            extra={"job_id": job_id, "entity_id": job.entity_id},
        )
        return job_id
