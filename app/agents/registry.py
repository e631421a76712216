from dataclasses import dataclass
from typing import Dict
from app.core.model_client import ModelClient
from app.core.workflow import GenerationStage
from app.agents.base import BaseAgent
from app.agents.impl_config import ConfigAssemblyAgent, EditTargetsAgent
from app.agents.impl_design import BlueprintAgent, DesignSystemAgent, SkippedStageAgent, StoredDesignSystemAgent
from app.agents.impl_build import AssemblyAgent, ComponentsAgent, EditAssemblyAgent, EditComponentsAgent

@dataclass
class AgentRegistry:
    mapping: Dict[GenerationStage, BaseAgent]

    def get(self, stage: GenerationStage) -> BaseAgent:
        return self.mapping[stage]

    @staticmethod
    def default(model_client: ModelClient) -> "AgentRegistry":
        return AgentRegistry(mapping={
            GenerationStage.CONFIG_ASSEMBLY: ConfigAssemblyAgent(),
            GenerationStage.DESIGN_SYSTEM: DesignSystemAgent(model_client),
            GenerationStage.BLUEPRINT: BlueprintAgent(model_client),
            GenerationStage.COMPONENTS: ComponentsAgent(model_client),
            GenerationStage.ASSEMBLY: AssemblyAgent(),
        })

    @staticmethod
    def for_edit(model_client: ModelClient) -> "AgentRegistry":
        return AgentRegistry(mapping={
            GenerationStage.CONFIG_ASSEMBLY: EditTargetsAgent(),
            GenerationStage.DESIGN_SYSTEM: StoredDesignSystemAgent(),
            GenerationStage.BLUEPRINT: SkippedStageAgent(GenerationStage.BLUEPRINT),
            GenerationStage.COMPONENTS: EditComponentsAgent(model_client),
            GenerationStage.ASSEMBLY: EditAssemblyAgent(),
        })
