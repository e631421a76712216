import logging
from typing import List
from app.agents.base import BaseAgent, RunContext
from app.core.config import settings
from app.core.model_client import ModelClient
from app.core.workflow import GenerationStage
from app.generators.site_gen.merge import load_design_system
from app.generators.site_gen.parsers import parse_blueprint, parse_design_system
from app.generators.site_gen.prompts import (
    BLUEPRINT_PROMPT,
    DESIGN_SYSTEM_PROMPT,
    build_blueprint_prompt,
    build_design_system_prompt,
)
from app.schemas.generation import GenerationEvent

log = logging.getLogger(__name__)


class DesignSystemAgent(BaseAgent):
    """Asks the model for color scales, typography and spacing tokens."""
    stage = GenerationStage.DESIGN_SYSTEM

    def __init__(self, model_client: ModelClient):
        self.model_client = model_client

    async def execute(self, ctx: RunContext) -> List[GenerationEvent]:
        text = await self.model_client.complete(
            DESIGN_SYSTEM_PROMPT,
            build_design_system_prompt(ctx.config),
            settings.design_system_max_tokens,
        )
        ctx.design_system = parse_design_system(text)
        log.info("Design system ready (heading=%s, body=%s)",
                 ctx.design_system.typography.heading_font,
                 ctx.design_system.typography.body_font,
                 extra=ctx.log_extra(self.stage))
        return []


class BlueprintAgent(BaseAgent):
    """Asks the model for the page and section plan."""
    stage = GenerationStage.BLUEPRINT

    def __init__(self, model_client: ModelClient):
        self.model_client = model_client

    async def execute(self, ctx: RunContext) -> List[GenerationEvent]:
        text = await self.model_client.complete(
            BLUEPRINT_PROMPT,
            build_blueprint_prompt(ctx.config, ctx.design_system),
            settings.blueprint_max_tokens,
        )
        ctx.blueprint = parse_blueprint(text)
        log.info("Blueprint ready: %d pages, %d expected files",
                 len(ctx.blueprint.pages), ctx.blueprint.expected_file_count(),
                 extra=ctx.log_extra(self.stage))
        return []


class StoredDesignSystemAgent(BaseAgent):
    """Edit runs reuse the design tokens saved with the previous version."""
    stage = GenerationStage.DESIGN_SYSTEM

    async def execute(self, ctx: RunContext) -> List[GenerationEvent]:
        ctx.design_system = load_design_system(ctx.previous_files)
        if ctx.design_system is None:
            log.info("No stored design system, using the generic prompt", extra=ctx.log_extra(self.stage))
        return []


class SkippedStageAgent(BaseAgent):
    """Placeholder for a stage an edit run reports but does not perform."""

    def __init__(self, stage: GenerationStage):
        self.stage = stage

    async def execute(self, ctx: RunContext) -> List[GenerationEvent]:
        return []
