"""Compile a persisted file set into one self-contained HTML preview document.

The document runs in a sandboxed iframe: React, ReactDOM and Babel come from
CDN script tags, every import is replaced by a global shim, and components
that are missing or truncated are dropped rather than breaking the page.
"""
import html
import json
import logging
import re
from dataclasses import dataclass
from string import Template
from typing import Dict, List, Mapping, Set, Tuple
from app.generators.preview import rewrite
from app.generators.preview.icons import find_icon_imports, used_icon_paths
from app.generators.preview.theme import tailwind_config_script
from app.generators.site_gen.render import DESIGN_SYSTEM_PATH
from app.generators.site_gen.utils import extract_component_name

log = logging.getLogger(__name__)

ROOT_PAGE = "src/app/page.tsx"
ROOT_LAYOUT = "src/app/layout.tsx"
GLOBALS_CSS = "src/app/globals.css"

_PAGE_FILE_RE = re.compile(r"^src/app/(.*?)page\.tsx$")

# Top-level names the document itself declares.
RESERVED_GLOBALS = rewrite.SHIM_COMPONENTS | {"Layout", "Page", "App", "ErrorBoundary"}


@dataclass
class PageLink:
    path: str
    title: str

    def to_dict(self) -> Dict[str, str]:
        return {"path": self.path, "title": self.title}


@dataclass
class ComponentSet:
    valid: Dict[str, str]  # name -> source
    available: Set[str]
    truncated: Set[str]


def _page_title(page_path: str) -> str:
    if page_path == "/":
        return "Home"
    segment = [s for s in page_path.split("/") if s][-1]
    segment = re.sub(r"^\[|\]$", "", segment)
    segment = re.sub(r"([A-Z])", r" \1", segment).strip()
    return re.sub(r"(^|\s)\S", lambda m: m.group(0).upper(), segment)


def derive_available_pages(files: Mapping[str, str]) -> List[PageLink]:
    """Routes with a page file, Home first then alphabetical."""
    pages = []
    for path in files:
        match = _PAGE_FILE_RE.match(path)
        if not match:
            continue
        segment = match.group(1)
        page_path = "/" + segment.rstrip("/") if segment else "/"
        pages.append(PageLink(path=page_path, title=_page_title(page_path)))
    pages.sort(key=lambda p: (p.path != "/", p.path))
    return pages


def resolve_page_file(page: str) -> str:
    if page in ("", "/"):
        return ROOT_PAGE
    return f"src/app/{page.strip('/')}/page.tsx"


def _component_name(path: str) -> str:
    if not (path.startswith("src/components/") and path.endswith(".tsx")):
        return ""
    return extract_component_name(path) or ""


def classify_components(files: Mapping[str, str]) -> ComponentSet:
    valid: Dict[str, str] = {}
    truncated: Set[str] = set()
    for path, content in files.items():
        name = _component_name(path)
        if not name:
            continue
        if rewrite.is_truncated(content):
            truncated.add(name)
        else:
            valid[name] = content
    return ComponentSet(valid=valid, available=set(valid), truncated=truncated)


def resolve_icon_bindings(files: Mapping[str, str]) -> Tuple[Dict[str, str], Dict[str, str]]:
    """Bind lucide imports to document-level shims.

    An icon whose local name clashes with a document global or a component is
    bound as ``<name>Icon`` instead, and the importing file is rewritten to use
    that name. Returns the rewritten files and the binding -> icon map.
    """
    reserved = RESERVED_GLOBALS | {name for name in map(_component_name, files) if name}
    rewritten = dict(files)
    bindings: Dict[str, str] = {}
    for path, content in files.items():
        if not path.endswith(".tsx"):
            continue
        for binding, icon in find_icon_imports([content]).items():
            if binding in reserved:
                alias = binding + "Icon"
                while alias in reserved:
                    alias += "Icon"
                rewritten[path] = rewrite.rename_binding(rewritten[path], binding, alias)
                binding = alias
            bindings.setdefault(binding, icon)
    return rewritten, bindings


def diagnostic_html(message: str) -> str:
    return f"<html><body><p>{html.escape(message)}</p></body></html>"


def build_app_code(files: Mapping[str, str], page: str, components: ComponentSet, known: Set[str] = frozenset()) -> str:
    page_source = files.get(resolve_page_file(page)) or files.get(ROOT_PAGE) or ""
    page_code = rewrite.process_page_code(page_source, components.available, components.truncated, known)

    layout_code = ""
    layout_source = files.get(ROOT_LAYOUT)
    if layout_source:
        layout_code = rewrite.process_layout_code(layout_source, components.available, components.truncated, known)
    else:
        has_navbar = "Navbar" in components.available
        has_footer = "Footer" in components.available
        if has_navbar or has_footer:
            layout_code = rewrite.fallback_layout_code(has_navbar, has_footer)

    if not layout_code:
        return rewrite.rename_page_to_app(page_code)
    return f"""
{layout_code}

{page_code}

function App() {{
  return React.createElement(Layout, null, React.createElement(Page, null));
}}
"""


def _script_safe(code: str) -> str:
    return code.replace("</script", "<\\/script")


def build_preview_html(files: Mapping[str, str], page: str = "/") -> str:
    """Render ``page`` of the given path -> content file set as one HTML document."""
    files = {path: rewrite.normalize_punctuation(content) for path, content in files.items()}
    files, icon_bindings = resolve_icon_bindings(files)
    components = classify_components(files)
    if components.truncated:
        log.info("Preview skipping truncated components: %s", ", ".join(sorted(components.truncated)))
    known = set(icon_bindings)

    component_scripts = "\n".join(
        rewrite.wrap_component_module(name, rewrite.clean_component_code(
            source, rewrite.missing_components(source, components.available, components.truncated, known)))
        for name, source in components.valid.items()
    )
    app_code = build_app_code(files, page, components, known)

    icon_shims = "\n".join(
        f"    const {binding} = createIcon('{icon}');" for binding, icon in icon_bindings.items()
    )

    return _DOCUMENT.substitute(
        global_css=rewrite.clean_global_css(files.get(GLOBALS_CSS, "")),
        tailwind_config=tailwind_config_script(files.get(DESIGN_SYSTEM_PATH)),
        icon_paths=json.dumps(used_icon_paths(icon_bindings.values())),
        icon_shims=icon_shims,
        component_scripts=_script_safe(component_scripts),
        app_code=_script_safe(app_code),
        available_pages=json.dumps([p.to_dict() for p in derive_available_pages(files)]),
    )


_DOCUMENT = Template("""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1.0" />
  <title>Preview</title>
  <link rel="preconnect" href="https://fonts.googleapis.com" />
  <link rel="preconnect" href="https://fonts.gstatic.com" crossorigin />
  <link href="https://fonts.googleapis.com/css2?family=Inter:wght@300;400;500;600;700;800&family=Space+Grotesk:wght@400;500;600;700&family=DM+Sans:wght@400;500;700&family=Poppins:wght@300;400;500;600;700&family=Playfair+Display:wght@400;600;700&family=Manrope:wght@400;600;800&family=Lora:wght@400;600&display=swap" rel="stylesheet" />
  <style>
    body { margin: 0; padding: 0; }
    @keyframes shimmer { 0% { background-position: -200% 0; } 100% { background-position: 200% 0; } }
    #__loading { font-family: system-ui, sans-serif; padding: 64px 24px; }
    #__loading .bar { background: linear-gradient(90deg, #f0f0f0 25%, #e0e0e0 50%, #f0f0f0 75%); background-size: 200% 100%; animation: shimmer 1.5s infinite; border-radius: 4px; margin: 0 auto 12px; }
    $global_css

    nav.bg-transparent,
    nav[class*="bg-transparent"] {
      background-color: white !important;
      border-bottom: 1px solid #e5e7eb !important;
    }
    nav[class*="bg-transparent"] [class*="text-white"] { color: #111827 !important; }
  </style>
</head>
<body>
  <div id="root"></div>
  <div id="__loading">
    <div class="bar" style="height:36px;width:60%;max-width:480px"></div>
    <div class="bar" style="height:14px;width:45%;max-width:340px"></div>
    <div class="bar" style="height:40px;width:120px"></div>
  </div>
  <script src="https://cdn.tailwindcss.com"></script>
  <script>
$tailwind_config
  </script>
  <script src="https://unpkg.com/react@18/umd/react.production.min.js" crossorigin></script>
  <script src="https://unpkg.com/react-dom@18/umd/react-dom.production.min.js" crossorigin></script>
  <script src="https://unpkg.com/@babel/standalone/babel.min.js"></script>

  <script id="app-source" type="text/plain">
    const { useState, useEffect, useRef, useCallback, useMemo, useContext, useReducer, useLayoutEffect, useId } = React;
    const Fragment = React.Fragment;
    const createContext = React.createContext;
    const forwardRef = React.forwardRef;
    const memo = React.memo;

    // next/image and next/link
    const Image = ({ src, alt, width, height, fill, className, priority, sizes, ...rest }: any) => {
      const style = fill
        ? { position: 'absolute', inset: 0, width: '100%', height: '100%', objectFit: 'cover' }
        : {};
      return React.createElement('img', {
        src: src || '', alt: alt || '',
        width: fill ? undefined : width, height: fill ? undefined : height,
        className, style, loading: priority ? 'eager' : 'lazy', ...rest,
      });
    };
    const Link = ({ href, children, className, ...props }: any) =>
      React.createElement('a', { href, className, ...props }, children);

    const __ICON_PATHS__: Record<string, string[]> = $icon_paths;
    const createIcon = (name: string) => ({ className, size, ...props }: any) => {
      const paths = __ICON_PATHS__[name];
      if (!paths) {
        return React.createElement('span', {
          className, 'aria-hidden': 'true',
          style: { display: 'inline-block', width: size || '1em', height: size || '1em' },
          ...props,
        });
      }
      return React.createElement('svg', {
        xmlns: 'http://www.w3.org/2000/svg', width: size || 24, height: size || 24,
        viewBox: '0 0 24 24', fill: 'none', stroke: 'currentColor', strokeWidth: 2,
        strokeLinecap: 'round', strokeLinejoin: 'round', className, 'aria-hidden': 'true',
        ...props, dangerouslySetInnerHTML: { __html: paths.join('') },
      });
    };
$icon_shims

    const clsx = (...args: any[]) => args.flat().filter(Boolean).join(' ');
    const cn = clsx;
    const twMerge = (...args: any[]) => args.flat().filter(Boolean).join(' ');
    const twJoin = (...args: any[]) => args.flat().filter(Boolean).join(' ');

    $component_scripts

    $app_code

    class ErrorBoundary extends React.Component<any, any> {
      constructor(props: any) {
        super(props);
        this.state = { hasError: false, error: null };
      }
      static getDerivedStateFromError(error: any) {
        return { hasError: true, error };
      }
      render() {
        if (this.state.hasError) {
          return React.createElement('div', {
            style: { padding: '24px', fontFamily: 'monospace', color: '#dc2626', background: '#fef2f2', border: '1px solid #fecaca', borderRadius: '8px', margin: '16px', whiteSpace: 'pre-wrap', fontSize: '13px' }
          }, 'Preview Error:\\n' + String(this.state.error?.message || this.state.error));
        }
        return this.props.children;
      }
    }

    const root = ReactDOM.createRoot(document.getElementById('root')!);
    root.render(React.createElement(ErrorBoundary, null, React.createElement(App)));
  </script>

  <script>
    (function() {
      var sourceEl = document.getElementById('app-source');
      var rootEl = document.getElementById('root');
      var loadingEl = document.getElementById('__loading');
      try {
        var result = Babel.transform(sourceEl ? sourceEl.textContent : '', {
          presets: ['react', 'typescript'],
          filename: 'app.tsx',
        });
        new Function('React', 'ReactDOM', result.code)(React, ReactDOM);
        if (loadingEl) loadingEl.style.display = 'none';
      } catch (err) {
        console.error('Preview compilation/execution error:', err);
        if (loadingEl) loadingEl.style.display = 'none';
        var panel = document.createElement('div');
        panel.setAttribute('style', 'padding:24px;font-family:monospace;color:#dc2626;background:#fef2f2;border:1px solid #fecaca;border-radius:8px;margin:16px;white-space:pre-wrap;font-size:13px;max-height:80vh;overflow:auto;');
        panel.textContent = 'Preview Error:\\n\\n' + String(err.message || err);
        rootEl.innerHTML = '';
        rootEl.appendChild(panel);
      }
    })();
  </script>

  <script>
    document.addEventListener('click', function(e) {
      var link = e.target.closest ? e.target.closest('a') : null;
      if (!link) return;
      var href = link.getAttribute('href');
      if (href && href.startsWith('/') && !href.startsWith('//')) {
        e.preventDefault();
        window.parent.postMessage({ type: 'sitecraft:navigate', page: href }, '*');
      }
    });
    window.parent.postMessage({ type: 'sitecraft:pages', pages: $available_pages }, '*');
  </script>
</body>
</html>""")
