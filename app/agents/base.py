from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Dict, List, Optional, Set
from app.core.workflow import EventType, GenerationStage
from app.generators.site_gen.types import VirtualFile, VirtualFileTree
from app.schemas.generation import DesignSystem, GenerationConfig, GenerationEvent, PageBlueprint


@dataclass
class RunContext:
    """State owned by a single pipeline run. Never shared between runs."""
    raw_config: Any = None
    config: Optional[GenerationConfig] = None
    design_system: Optional[DesignSystem] = None
    blueprint: Optional[PageBlueprint] = None
    project_id: str = "-"

    # Files produced by the components stage, in completion order
    generated: List[VirtualFile] = field(default_factory=list)
    # Final file set, filled by the assembly stage
    files: VirtualFileTree = field(default_factory=VirtualFileTree)
    seen_paths: Set[str] = field(default_factory=set)
    completed_files: int = 0

    # Edit runs
    previous_files: List[VirtualFile] = field(default_factory=list)
    edit_instructions: str = ""
    target_paths: Optional[List[str]] = None
    targets: Dict[str, str] = field(default_factory=dict)

    def log_extra(self, stage: GenerationStage) -> Dict[str, str]:
        return {"project_id": self.project_id, "stage": stage.value}


class BaseAgent:
    """One pipeline stage. The engine wraps ``run`` in stage-start/stage-complete."""
    stage: GenerationStage

    def start_event(self, ctx: RunContext) -> GenerationEvent:
        return GenerationEvent(type=EventType.STAGE_START, stage=self.stage)

    def complete_event(self, ctx: RunContext) -> GenerationEvent:
        return GenerationEvent(type=EventType.STAGE_COMPLETE, stage=self.stage)

    async def execute(self, ctx: RunContext) -> List[GenerationEvent]:
        """Do the stage's work and return the events it produced, if any."""
        raise NotImplementedError

    async def run(self, ctx: RunContext) -> AsyncIterator[GenerationEvent]:
        for event in await self.execute(ctx):
            yield event
