from enum import Enum

class GenerationStage(str, Enum):
    CONFIG_ASSEMBLY = "config-assembly"
    DESIGN_SYSTEM = "design-system"
    BLUEPRINT = "blueprint"
    COMPONENTS = "components"
    ASSEMBLY = "assembly"
    COMPLETE = "complete"
    ERROR = "error"

class EventType(str, Enum):
    STAGE_START = "stage-start"
    STAGE_COMPLETE = "stage-complete"
    COMPONENT_START = "component-start"
    COMPONENT_CHUNK = "component-chunk"
    COMPONENT_COMPLETE = "component-complete"
    GENERATION_COMPLETE = "generation-complete"
    ERROR = "error"

class VersionStatus(str, Enum):
    PENDING = "pending"
    GENERATING = "generating"
    COMPLETE = "complete"
    ERROR = "error"

class TriggerType(str, Enum):
    INITIAL = "initial"
    FULL_REGENERATE = "full-regenerate"
    EDIT = "edit"

class ProjectStatus(str, Enum):
    DRAFT = "draft"
    GENERATING = "generating"
    GENERATED = "generated"
    ERROR = "error"

# Prefix used for the human-readable message of a stage's error event
STAGE_FAILURE_LABELS = {
    GenerationStage.CONFIG_ASSEMBLY: "Config assembly failed",
    GenerationStage.DESIGN_SYSTEM: "Design system generation failed",
    GenerationStage.BLUEPRINT: "Blueprint generation failed",
    GenerationStage.COMPONENTS: "Component generation failed",
    GenerationStage.ASSEMBLY: "Project assembly failed",
}

# Stages the full pipeline walks through, in order
PIPELINE_STAGES = [
    GenerationStage.CONFIG_ASSEMBLY,
    GenerationStage.DESIGN_SYSTEM,
    GenerationStage.BLUEPRINT,
    GenerationStage.COMPONENTS,
    GenerationStage.ASSEMBLY,
]
