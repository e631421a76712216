import logging
from typing import List
from pydantic import ValidationError
from app.agents.base import BaseAgent, RunContext
from app.core.errors import NoFilesError, StageValidationError
from app.core.workflow import GenerationStage
from app.generators.site_gen.merge import select_edit_targets
from app.schemas.generation import GenerationConfig, GenerationEvent

log = logging.getLogger(__name__)


def assemble_config(config: GenerationConfig) -> GenerationConfig:
    """Normalize user input: trim business text, re-index sections by order, default the prompt."""
    business = config.business.model_copy(update={
        "name": config.business.name.strip(),
        "description": config.business.description.strip(),
        "industry": config.business.industry.strip(),
        "target_audience": config.business.target_audience.strip(),
    })
    ordered = sorted(config.sections, key=lambda s: s.order)
    sections = [s.model_copy(update={"order": idx}) for idx, s in enumerate(ordered)]
    return config.model_copy(update={
        "business": business,
        "sections": sections,
        "ai_prompt": (config.ai_prompt or "").strip(),
    })


class ConfigAssemblyAgent(BaseAgent):
    stage = GenerationStage.CONFIG_ASSEMBLY

    async def execute(self, ctx: RunContext) -> List[GenerationEvent]:
        raw = ctx.raw_config if ctx.raw_config is not None else ctx.config
        if raw is None:
            raise StageValidationError("No generation config supplied")
        try:
            config = raw if isinstance(raw, GenerationConfig) else GenerationConfig.model_validate(raw)
        except ValidationError as e:
            raise StageValidationError(f"Invalid generation config: {e}") from e
        ctx.config = assemble_config(config)
        log.info("Config assembled for site type %s with %d sections",
                 ctx.config.site_type, len(ctx.config.sections), extra=ctx.log_extra(self.stage))
        return []


class EditTargetsAgent(BaseAgent):
    """Config stage of an edit run: picks the files the model may rewrite."""
    stage = GenerationStage.CONFIG_ASSEMBLY

    async def execute(self, ctx: RunContext) -> List[GenerationEvent]:
        if not ctx.previous_files:
            raise NoFilesError()
        ctx.edit_instructions = ctx.edit_instructions.strip()
        if not ctx.edit_instructions:
            raise StageValidationError("Edit instructions are empty")
        ctx.targets = select_edit_targets(ctx.previous_files, ctx.target_paths)
        log.info("Selected %d edit targets", len(ctx.targets), extra=ctx.log_extra(self.stage))
        return []
