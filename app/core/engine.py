from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any, AsyncIterator, List, Optional
from app.core.model_client import ModelClient
from app.core.workflow import EventType, GenerationStage, PIPELINE_STAGES, STAGE_FAILURE_LABELS
from app.agents.base import RunContext
from app.agents.registry import AgentRegistry
from app.generators.site_gen.types import VirtualFile
from app.schemas.generation import GenerationEvent

log = logging.getLogger(__name__)


@dataclass
class EditRequest:
    previous_files: List[VirtualFile]
    instructions: str
    target_files: Optional[List[str]] = None


class WorkflowEngine:
    """Runs the registry's agents stage by stage, translating failures into one error event."""

    def __init__(self, registry: AgentRegistry):
        self.registry = registry

    async def run(self, ctx: RunContext) -> AsyncIterator[GenerationEvent]:
        for stage in PIPELINE_STAGES:
            agent = self.registry.get(stage)
            log.info("Running stage", extra=ctx.log_extra(stage))
            try:
                yield agent.start_event(ctx)
                async for event in agent.run(ctx):
                    yield event
                yield agent.complete_event(ctx)
            except Exception as e:
                log.error("Stage failed: %s", e, extra=ctx.log_extra(stage))
                yield GenerationEvent(
                    type=EventType.ERROR,
                    stage=stage,
                    error=f"{STAGE_FAILURE_LABELS[stage]}: {e}",
                )
                return

        log.info("Generation complete with %d files", len(ctx.files),
                 extra=ctx.log_extra(GenerationStage.COMPLETE))
        yield GenerationEvent(
            type=EventType.GENERATION_COMPLETE,
            stage=GenerationStage.COMPLETE,
            total_files=len(ctx.files),
        )


class GenerationPipeline:
    """Full five-stage generation from a GenerationConfig.

    Pass a RunContext to read the final files, design system and blueprint
    once the event stream is exhausted.
    """

    def __init__(self, model_client: ModelClient, registry: Optional[AgentRegistry] = None):
        self.engine = WorkflowEngine(registry or AgentRegistry.default(model_client))

    def run(self, config: Any, ctx: Optional[RunContext] = None, project_id: str = "-") -> AsyncIterator[GenerationEvent]:
        ctx = ctx if ctx is not None else RunContext(project_id=project_id)
        ctx.raw_config = config
        return self.engine.run(ctx)


class EditPipeline:
    """Regenerates a subset of a previous version's files and merges the result."""

    def __init__(self, model_client: ModelClient, registry: Optional[AgentRegistry] = None):
        self.engine = WorkflowEngine(registry or AgentRegistry.for_edit(model_client))

    def run(self, request: EditRequest, ctx: Optional[RunContext] = None, project_id: str = "-") -> AsyncIterator[GenerationEvent]:
        ctx = ctx if ctx is not None else RunContext(project_id=project_id)
        ctx.previous_files = list(request.previous_files)
        ctx.edit_instructions = request.instructions
        ctx.target_paths = request.target_files
        return self.engine.run(ctx)
