from packages.generation.models.domain.enums import StepOutcome
from packages.generation.models.domain.step_result import StepResult
from packages.generation.steps.base import StepContext, StepDefinition
from common.core.otel_axiom_exporter import get_logger

logger = get_logger(__name__)


def _describe(error: Exception) -> str:
    return f"{type(error).__name__}: {error}"


async def execute_step(definition: StepDefinition, context: StepContext) -> StepResult:
    """
    Run one step and classify the result.

    REQUIRED failures become FATAL. OPTIONAL failures become SKIPPED_FALLBACK
    carrying the fallback data; a fallback that itself fails is FATAL.
    """
    try:
        produced = await definition.run(context)
        return StepResult(
            step_name=definition.step,
            outcome=StepOutcome.OK,
            produced_data=produced or {},
        )
    except Exception as e:
        detail = _describe(e)

        if definition.required:
            logger.warning(
                f"Required step {definition.step.value} failed for session {context.session_id}: {detail}"
            )
            return StepResult(
                step_name=definition.step,
                outcome=StepOutcome.FATAL,
                error_detail=detail,
            )

        logger.info(
            f"Optional step {definition.step.value} failed for session {context.session_id}, using fallback: {detail}"
        )
        try:
            fallback_data = definition.fallback(context, e)
        except Exception as fallback_error:
            logger.error(
                f"Fallback for {definition.step.value} failed: {fallback_error}"
            )
            return StepResult(
                step_name=definition.step,
                outcome=StepOutcome.FATAL,
                error_detail=f"{detail}; fallback failed: {_describe(fallback_error)}",
            )

        return StepResult(
            step_name=definition.step,
            outcome=StepOutcome.SKIPPED_FALLBACK,
            produced_data=fallback_data,
            error_detail=detail,
        )
