import logging
from typing import AsyncIterator, List, Optional
from app.agents.base import BaseAgent, RunContext
from app.core.config import settings
from app.core.model_client import ModelClient
from app.core.workflow import EventType, GenerationStage
from app.generators.site_gen.extractor import BlockStream
from app.generators.site_gen.merge import merge_file_sets
from app.generators.site_gen.prompts import (
    GENERIC_SYSTEM_PROMPT,
    blueprint_summary,
    build_edit_prompt,
    build_site_prompt,
    build_system_prompt,
)
from app.generators.site_gen.render import render_scaffold_files
from app.generators.site_gen.types import Block, VirtualFile
from app.generators.site_gen.utils import display_name, infer_file_type, infer_section_type
from app.schemas.generation import FileRef, GenerationEvent

log = logging.getLogger(__name__)


class StreamingFilesAgent(BaseAgent):
    """Streams one model call and turns completed fenced blocks into files."""
    stage = GenerationStage.COMPONENTS

    def __init__(self, model_client: ModelClient):
        self.model_client = model_client

    def total_files(self, ctx: RunContext) -> int:
        raise NotImplementedError

    def prompts(self, ctx: RunContext) -> tuple[str, str, int]:
        """(system prompt, user prompt, max tokens)."""
        raise NotImplementedError

    def start_event(self, ctx: RunContext) -> GenerationEvent:
        return GenerationEvent(
            type=EventType.STAGE_START, stage=self.stage,
            total_files=self.total_files(ctx), completed_files=0,
        )

    def complete_event(self, ctx: RunContext) -> GenerationEvent:
        return GenerationEvent(
            type=EventType.STAGE_COMPLETE, stage=self.stage,
            total_files=ctx.completed_files, completed_files=ctx.completed_files,
        )

    def _file_completed(self, ctx: RunContext, block: Block) -> GenerationEvent:
        ctx.completed_files += 1
        ctx.generated.append(VirtualFile(
            path=block.file_path,
            content=block.content,
            type=infer_file_type(block.file_path),
            section_type=infer_section_type(block.file_path),
        ))
        return GenerationEvent(
            type=EventType.COMPONENT_COMPLETE,
            stage=self.stage,
            component_name=display_name(block.file_path),
            file=FileRef(path=block.file_path, content=block.content),
            total_files=self.total_files(ctx),
            completed_files=ctx.completed_files,
        )

    async def run(self, ctx: RunContext) -> AsyncIterator[GenerationEvent]:
        system_prompt, user_prompt, max_tokens = self.prompts(ctx)
        stream = BlockStream(seen_paths=ctx.seen_paths)
        current: Optional[str] = None
        started_paths = set()

        async for chunk in self.model_client.stream_completion(system_prompt, user_prompt, max_tokens):
            relayed = False
            blocks = stream.feed(chunk)
            if current:
                yield GenerationEvent(type=EventType.COMPONENT_CHUNK, stage=self.stage,
                                      component_name=current, chunk=chunk)
                relayed = True
            for block in blocks:
                yield self._file_completed(ctx, block)
                current = None

            open_path = stream.open_path
            if open_path and open_path not in ctx.seen_paths and open_path not in started_paths:
                started_paths.add(open_path)
                current = display_name(open_path)
                yield GenerationEvent(type=EventType.COMPONENT_START, stage=self.stage, component_name=current)
                if not relayed:
                    yield GenerationEvent(type=EventType.COMPONENT_CHUNK, stage=self.stage,
                                          component_name=current, chunk=chunk)

        # Output cut off by the token limit leaves the last block unterminated
        for block in stream.finish():
            log.warning("Recovered unterminated block %s", block.file_path, extra=ctx.log_extra(self.stage))
            yield self._file_completed(ctx, block)

        log.info("Streamed %d files", ctx.completed_files, extra=ctx.log_extra(self.stage))


class ComponentsAgent(StreamingFilesAgent):
    def total_files(self, ctx: RunContext) -> int:
        return ctx.blueprint.expected_file_count()

    def prompts(self, ctx: RunContext) -> tuple[str, str, int]:
        user_prompt = build_site_prompt(ctx.config) + "\n\n" + blueprint_summary(ctx.blueprint)
        return build_system_prompt(ctx.design_system), user_prompt, settings.component_max_tokens


class EditComponentsAgent(StreamingFilesAgent):
    def total_files(self, ctx: RunContext) -> int:
        return len(ctx.targets)

    def prompts(self, ctx: RunContext) -> tuple[str, str, int]:
        if ctx.design_system is not None:
            system_prompt = build_system_prompt(ctx.design_system)
        else:
            system_prompt = GENERIC_SYSTEM_PROMPT
        return system_prompt, build_edit_prompt(ctx.edit_instructions, ctx.targets), settings.edit_max_tokens


class AssemblyAgent(BaseAgent):
    """Adds the deterministic scaffold files to the generated ones."""
    stage = GenerationStage.ASSEMBLY

    async def execute(self, ctx: RunContext) -> List[GenerationEvent]:
        events = []
        scaffold = render_scaffold_files(ctx.config, ctx.design_system)
        for f in scaffold:
            ctx.files.add(f)
            events.append(GenerationEvent(
                type=EventType.COMPONENT_COMPLETE, stage=self.stage,
                component_name=f.path, file=FileRef(path=f.path, content=f.content),
            ))
        # Scaffold paths are canonical; a generated file at the same path is dropped
        for f in ctx.generated:
            if f.path in ctx.files:
                log.warning("Generated file %s collides with scaffold, keeping scaffold",
                            f.path, extra=ctx.log_extra(self.stage))
                continue
            ctx.files.add(f)
        return events


class EditAssemblyAgent(BaseAgent):
    """Merges edited files over the previous version's files."""
    stage = GenerationStage.ASSEMBLY

    async def execute(self, ctx: RunContext) -> List[GenerationEvent]:
        ctx.files = merge_file_sets(ctx.previous_files, ctx.generated)
        log.info("Merged %d edited files into %d total", len(ctx.generated), len(ctx.files),
                 extra=ctx.log_extra(self.stage))
        return [
            GenerationEvent(
                type=EventType.COMPONENT_COMPLETE, stage=self.stage,
                component_name=f.path if f.path not in ctx.seen_paths else f"{f.path} (edited)",
                file=FileRef(path=f.path, content=f.content),
            )
            for f in ctx.files
        ]
