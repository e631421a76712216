"""Source-to-source rewrites that make generated TSX executable in the browser.

This is not a compiler: it handles the restricted subset the model is told to
write. Each step is a named function; regex steps are ordered (pattern,
replacement) lists applied in sequence.
"""
import re
from typing import Iterable, List, Pattern, Set, Tuple

Rule = Tuple[Pattern, str]

PUNCTUATION_MAP = {
    "‘": "'", "’": "'", "′": "'",
    "“": '"', "”": '"', "″": '"',
    "–": "-",
    "—": "--",
    "…": "...",
}
_PUNCTUATION_TABLE = str.maketrans(PUNCTUATION_MAP)

DIRECTIVE_AND_IMPORT_RULES: List[Rule] = [
    (re.compile(r"""['"]use (?:client|server)['"];?\s*\n?"""), ""),
    (re.compile(r"""import\s+[\s\S]*?from\s+['"][^'"]+['"];?\s*\n?"""), ""),
    (re.compile(r"""import\s+['"][^'"]+['"];?\s*\n?"""), ""),
]

TS_ANNOTATION_RULES: List[Rule] = [
    (re.compile(r":\s*React\.\w+(?:<[^>]*>)?"), ""),
    (re.compile(r"\bas\s+(?:const|string|number|boolean|any|\w+(?:<[^>]*>)?)"), ""),
]

COMPONENT_TYPE_RULES: List[Rule] = [
    (re.compile(r"\binterface\s+\w+\s*\{[\s\S]*?\}\s*\n?"), ""),
    (re.compile(r"\btype\s+\w+\s*=\s*[\s\S]*?;\s*\n?"), ""),
    (re.compile(r":\s*React\.FC(?:<[^>]*>)?"), ""),
    (re.compile(r":\s*React\.CSSProperties"), ""),
    (re.compile(r":\s*React\.(?:MouseEvent|FormEvent|ChangeEvent)(?:<[^>]*>)?"), ""),
    (re.compile(r"\bas\s+(?:const|string|number|boolean|any|\w+(?:<[^>]*>)?)"), ""),
]

LAYOUT_DOCUMENT_RULES: List[Rule] = [
    (re.compile(r"\{children\}"), "{props.children}"),
    (re.compile(r"<html[^>]*>"), "<>"),
    (re.compile(r"</html>"), "</>"),
    (re.compile(r"<head[\s\S]*?</head>"), ""),
    (re.compile(r"<body[^>]*>"), "<div>"),
    (re.compile(r"</body>"), "</div>"),
]

# next/font loaders and their className/variable references
FONT_LOADER_RULES: List[Rule] = [
    (re.compile(r"const\s+\w+\s*=\s*\w+\(\{[\s\S]*?\}\);?\s*\n?"), ""),
    (re.compile(r"\$\{\w+\.(?:variable|className)\}"), ""),
    (re.compile(r"\w+\.(?:variable|className)"), '""'),
]

_METADATA_EXPORT_RE = re.compile(r"export\s+const\s+metadata[\s\S]*?;\s*\n?")
_DEFAULT_EXPORT_FN_RE = re.compile(r"export\s+default\s+function\s+(\w+)")
_IMPORT_RE = re.compile(r"""import\s+(?!type\b)([\w$\s,{}*]+?)\s+from\s+['"]([^'"]+)['"]""")
_NAMED_IMPORT_RE = re.compile(r"\{([^}]*)\}")
_JSX_TAG_RE = re.compile(r"(?<![\w$.])<([A-Z][\w$]*)")
_LOCAL_BINDING_RE = re.compile(r"\b(?:function|class|const|let|var)\s+([A-Z][\w$]*)")
_RENAMED_BINDING_RE = re.compile(r"\b\w+\s*:\s*([A-Z][\w$]*)\s*(?=[,}=])")

_EXPORTED_CONST_RE = re.compile(r"const\s+(\w+)\s*=\s*function\s+\w+")

# Globals the preview document defines for every module.
SHIM_COMPONENTS = frozenset({"Image", "Link", "Fragment"})

_LAYOUT_DESTRUCTURED_RE = re.compile(r"function Layout\s*\(\s*\{\s*children\s*\}\s*(?::\s*\{[^}]*\})?\s*\)")
_LAYOUT_TYPED_PROPS_RE = re.compile(r"function Layout\s*\(\s*(?:props\s*:\s*\{[^}]*\}|props\s*:\s*\w+)\s*\)")
_LAYOUT_ANY_PARAMS_RE = re.compile(r"function Layout\s*\([^)]*\)")

_CSS_RULES: List[Rule] = [
    (re.compile(r"@tailwind\s+[^;]+;"), ""),
    (re.compile(r"@import\s+[^;]+;"), ""),
]
_CSS_LAYER_START_RE = re.compile(r"@layer\s+\w+\s*\{")
_CSS_APPLY_RE = re.compile(r"@apply\s+[^;]+;")

VALID_LAST_LINE_ENDINGS = ("}", ")", ";", "/>", "export default")


def apply_rules(code: str, rules: Iterable[Rule]) -> str:
    for pattern, replacement in rules:
        code = pattern.sub(replacement, code)
    return code


def normalize_punctuation(text: str) -> str:
    """Typographic quotes, dashes and ellipses break JSX string literals."""
    return text.translate(_PUNCTUATION_TABLE)


def strip_directives_and_imports(code: str) -> str:
    return apply_rules(code, DIRECTIVE_AND_IMPORT_RULES)


def is_truncated(content: str) -> bool:
    """Heuristic: a complete file's last non-blank line ends a statement or expression."""
    lines = content.rstrip().split("\n")
    last_line = lines[-1].strip() if lines else ""
    return not any(last_line.endswith(e) or last_line.startswith(e) for e in VALID_LAST_LINE_ENDINGS)


def _is_component_module(source: str) -> bool:
    return "components/" in source or source.startswith(".")


def _module_file_name(source: str) -> str:
    segments = [s for s in source.split("/") if s not in ("", ".", "..")]
    if segments and segments[-1] == "index":
        segments.pop()
    return re.sub(r"\.(?:tsx|ts|jsx|js)$", "", segments[-1]) if segments else ""


def _component_imports(code: str) -> Iterable[Tuple[str, str]]:
    """(local binding, component name) for default and named imports of component modules."""
    for match in _IMPORT_RE.finditer(code):
        clause, source = match.group(1), match.group(2)
        if not _is_component_module(source):
            continue
        named = _NAMED_IMPORT_RE.search(clause)
        if named:
            for raw in named.group(1).split(","):
                imported, _, alias = raw.strip().partition(" as ")
                imported = imported.strip()
                if imported:
                    yield (alias.strip() or imported), imported
            clause = clause[:named.start()] + clause[named.end():]
        default = clause.strip().strip(",").strip()
        if re.fullmatch(r"[A-Za-z_$][\w$]*", default):
            yield default, _module_file_name(source)


def find_unavailable_imports(code: str, available: Set[str], truncated: Set[str]) -> Set[str]:
    """Local names bound to component imports whose file is missing or truncated."""
    return {
        binding
        for binding, component in _component_imports(code)
        if binding[:1].isupper() and (component not in available or component in truncated)
    }


def local_bindings(code: str) -> Set[str]:
    return set(_LOCAL_BINDING_RE.findall(code)) | set(_RENAMED_BINDING_RE.findall(code))


def find_unknown_tags(code: str, known: Iterable[str]) -> Set[str]:
    """Capitalized JSX tags that nothing in scope defines."""
    in_scope = set(known) | local_bindings(code)
    return {tag for tag in _JSX_TAG_RE.findall(code) if tag not in in_scope}


def missing_components(code: str, available: Set[str], truncated: Set[str],
                       known: Iterable[str] = ()) -> Set[str]:
    """Every component ``code`` references that the preview cannot define."""
    in_scope = (set(available) - set(truncated)) | SHIM_COMPONENTS | set(known)
    return (find_unavailable_imports(code, available, truncated)
            | find_unknown_tags(code, in_scope)
            | set(truncated))


def rename_binding(code: str, old: str, new: str) -> str:
    """Rename JSX tags and value references of ``old``; object keys are left alone."""
    escaped = re.escape(old)
    code = re.sub(rf"<(/?){escaped}\b", lambda m: f"<{m.group(1)}{new}", code)
    code = re.sub(rf"([=:(\[?]\s*){escaped}\b", lambda m: m.group(1) + new, code)
    return re.sub(rf"([{{,]\s*){escaped}\b(?!\s*:)", lambda m: m.group(1) + new, code)


def remove_component_tags(code: str, names: Iterable[str]) -> str:
    """Drop self-closing, opening and closing JSX tags for each component name."""
    for name in names:
        escaped = re.escape(name)
        code = re.sub(rf"\s*<{escaped}\s*/>", "", code)
        code = re.sub(rf"\s*<{escaped}\b[^>]*>", "", code)
        code = re.sub(rf"\s*</{escaped}>", "", code)
    return code


def clean_component_code(code: str, missing: Iterable[str] = ()) -> str:
    """Turn a component module into a function body that returns the component."""
    code = remove_component_tags(strip_directives_and_imports(code), sorted(missing))
    code = _DEFAULT_EXPORT_FN_RE.sub(r"const \1 = function \1", code, count=1)
    match = _EXPORTED_CONST_RE.search(code)
    if match:
        code += f"\nreturn {match.group(1)};"
    return apply_rules(code, COMPONENT_TYPE_RULES)


def wrap_component_module(name: str, code: str) -> str:
    return f"""
// --- {name} ---
const {name}_module = (function() {{
  {code}
}})();
const {name} = {name}_module;
"""


def process_page_code(code: str, available: Set[str], truncated: Set[str], known: Iterable[str] = ()) -> str:
    """Page module -> ``function Page`` with unusable component references removed."""
    missing = missing_components(code, available, truncated, known)
    code = strip_directives_and_imports(code)
    code = remove_component_tags(code, sorted(missing))
    code = _DEFAULT_EXPORT_FN_RE.sub("function Page", code, count=1)
    return apply_rules(code, TS_ANNOTATION_RULES)


def _normalize_layout_signature(code: str) -> str:
    code = _LAYOUT_DESTRUCTURED_RE.sub("function Layout(props: any)", code, count=1)
    code = _LAYOUT_TYPED_PROPS_RE.sub("function Layout(props: any)", code, count=1)
    if not re.search(r"function Layout\s*\(", code):
        code = code.replace("function Layout", "function Layout(props: any)", 1)
    elif not re.search(r"function Layout\s*\(props", code):
        code = _LAYOUT_ANY_PARAMS_RE.sub("function Layout(props: any)", code, count=1)
    return code


def process_layout_code(code: str, available: Set[str], truncated: Set[str], known: Iterable[str] = ()) -> str:
    """Root layout -> ``function Layout(props)`` rendering a fragment instead of a document."""
    missing = missing_components(code, available, truncated, known)
    code = strip_directives_and_imports(code)
    code = _METADATA_EXPORT_RE.sub("", code)
    code = remove_component_tags(code, sorted(missing))
    code = _DEFAULT_EXPORT_FN_RE.sub("function Layout", code, count=1)
    code = apply_rules(code, LAYOUT_DOCUMENT_RULES)
    code = _normalize_layout_signature(code)
    code = apply_rules(code, TS_ANNOTATION_RULES)
    return apply_rules(code, FONT_LOADER_RULES)


def fallback_layout_code(has_navbar: bool, has_footer: bool) -> str:
    navbar = "React.createElement(Navbar, null)" if has_navbar else "null"
    footer = "React.createElement(Footer, null)" if has_footer else "null"
    return f"""
function Layout(props) {{
  return React.createElement('div', {{ className: 'fallback-layout-wrapper min-h-screen flex flex-col' }},
    {navbar},
    React.createElement('main', {{ className: 'flex-1 pt-16' }}, props.children),
    {footer}
  );
}}
"""


def rename_page_to_app(code: str) -> str:
    return re.sub(r"function Page\b", "function App", code, count=1)


def _strip_layer_blocks(css: str) -> str:
    out = []
    i = 0
    while i < len(css):
        match = _CSS_LAYER_START_RE.match(css, i)
        if not match:
            out.append(css[i])
            i += 1
            continue
        depth = 1
        j = match.end()
        while j < len(css) and depth > 0:
            if css[j] == "{":
                depth += 1
            elif css[j] == "}":
                depth -= 1
            j += 1
        i = j
    return "".join(out)


def clean_global_css(css: str) -> str:
    """Remove what the Tailwind CDN cannot process: directives, imports, @layer blocks, @apply."""
    css = apply_rules(css, _CSS_RULES)
    css = _strip_layer_blocks(css)
    return _CSS_APPLY_RE.sub("", css).strip()
