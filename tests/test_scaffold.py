"""Tests for the deterministic scaffold files and config assembly."""
import json
from app.agents.impl_config import assemble_config
from app.generators.site_gen.parsers import extract_json
from app.generators.site_gen.render import DESIGN_SYSTEM_PATH, render_scaffold_files
from app.generators.site_gen.utils import infer_file_type, infer_section_type, to_package_name
from app.schemas.generation import DesignSystem, GenerationConfig, PageBlueprint
from fakes import BLUEPRINT, DESIGN_SYSTEM, SAMPLE_CONFIG


def _config(**overrides):
    data = dict(SAMPLE_CONFIG)
    data.update(overrides)
    return assemble_config(GenerationConfig.model_validate(data))


def test_scaffold_files_and_types():
    """Five config files then the stored design system."""
    files = render_scaffold_files(_config(), DesignSystem.model_validate(DESIGN_SYSTEM))
    assert [(f.path, f.type) for f in files] == [
        ("package.json", "config"),
        ("next.config.js", "config"),
        ("tsconfig.json", "config"),
        ("tailwind.config.js", "config"),
        ("postcss.config.js", "config"),
        (DESIGN_SYSTEM_PATH, "data"),
    ]


def test_package_json_depends_on_site_type():
    """Stateful site types get a store library; the name is npm-safe."""
    ds = DesignSystem.model_validate(DESIGN_SYSTEM)
    landing = json.loads(render_scaffold_files(_config(), ds)[0].content)
    shop = json.loads(render_scaffold_files(_config(siteType="ecommerce"), ds)[0].content)

    assert landing["name"] == "bloom-co"
    assert "zustand" not in landing["dependencies"]
    assert "zustand" in shop["dependencies"]
    assert to_package_name("!!!") == "generated-site"


def test_tailwind_config_and_design_system_carry_tokens():
    ds = DesignSystem.model_validate(DESIGN_SYSTEM)
    files = {f.path: f.content for f in render_scaffold_files(_config(), ds)}

    tailwind = files["tailwind.config.js"]
    assert '"heading": [' in tailwind
    assert "Playfair Display" in tailwind
    assert '"boxShadow"' in tailwind

    stored = json.loads(files[DESIGN_SYSTEM_PATH])
    assert stored["typography"]["headingFont"] == "Playfair Display"
    assert stored["borderRadius"] == DESIGN_SYSTEM["borderRadius"]
    assert DesignSystem.model_validate(stored) == ds


def test_assemble_config_defaults_and_ordering():
    config = _config(aiPrompt=None)
    assert config.ai_prompt == ""
    assert [s.order for s in config.sections] == [0, 1]
    assert config.sections[0].type == "hero"


def test_blueprint_expected_files():
    """Distinct components plus one file per page."""
    blueprint = PageBlueprint.model_validate(BLUEPRINT)
    assert blueprint.expected_component_names() == ["Hero", "Features", "Navbar", "Footer"]
    assert blueprint.expected_file_count() == 5


def test_json_extraction_prefers_fenced_block():
    assert extract_json('Sure!\n```json\n{"a": 1}\n```\nDone {x}') == '{"a": 1}'
    assert extract_json('Here: {"a": {"b": 2}} thanks') == '{"a": {"b": 2}}'
    assert extract_json("no json") == "no json"


def test_file_classification():
    assert infer_file_type("src/app/about/page.tsx") == "page"
    assert infer_file_type("src/app/layout.tsx") == "page"
    assert infer_file_type("src/app/globals.css") == "style"
    assert infer_file_type("src/lib/products.ts") == "data"
    assert infer_file_type("src/components/Hero.tsx") == "component"
    assert infer_section_type("src/components/CallToAction.tsx") == "cta"
    assert infer_section_type("src/components/Hero.tsx") == "hero"
    assert infer_section_type("src/components/Widget.tsx") is None
