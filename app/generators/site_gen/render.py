"""Simple string templates for the deterministic scaffold files every version carries."""
import json
from typing import List
from app.generators.site_gen.types import VirtualFile
from app.generators.site_gen.utils import to_package_name
from app.schemas.generation import DesignSystem, GenerationConfig

DESIGN_SYSTEM_PATH = "src/lib/design-system.json"


def render_package_json(config: GenerationConfig) -> str:
    """Generate package.json content."""
    deps = {
        "next": "^14.2.0",
        "react": "^18.3.0",
        "react-dom": "^18.3.0",
        "tailwindcss": "^3.4.0",
        "autoprefixer": "^10.4.0",
        "postcss": "^8.4.0",
        "clsx": "^2.1.0",
        "tailwind-merge": "^2.4.0",
        "lucide-react": "^0.400.0",
    }

    # Cart and dashboard state
    if config.site_type in ("ecommerce", "saas"):
        deps["zustand"] = "^4.5.0"

    pkg = {
        "name": to_package_name(config.business.name),
        "version": "0.1.0",
        "private": True,
        "scripts": {
            "dev": "next dev",
            "build": "next build",
            "start": "next start",
            "lint": "next lint",
        },
        "dependencies": deps,
        "devDependencies": {
            "@types/node": "^20.0.0",
            "@types/react": "^18.3.0",
            "@types/react-dom": "^18.3.0",
            "typescript": "^5.4.0",
            "eslint": "^8.57.0",
            "eslint-config-next": "^14.2.0",
        },
    }
    return json.dumps(pkg, indent=2)


def render_next_config() -> str:
    """Generate next.config.js content."""
    return """/** @type {import('next').NextConfig} */
const nextConfig = {
  reactStrictMode: true,
  images: {
    remotePatterns: [
      { protocol: 'https', hostname: 'images.unsplash.com' },
      { protocol: 'https', hostname: 'via.placeholder.com' },
    ],
  },
};

module.exports = nextConfig;
"""


def render_tsconfig() -> str:
    """Generate tsconfig.json content."""
    tsconfig = {
        "compilerOptions": {
            "target": "ES2017",
            "lib": ["dom", "dom.iterable", "esnext"],
            "allowJs": True,
            "skipLibCheck": True,
            "strict": True,
            "noEmit": True,
            "esModuleInterop": True,
            "module": "esnext",
            "moduleResolution": "bundler",
            "resolveJsonModule": True,
            "isolatedModules": True,
            "jsx": "preserve",
            "incremental": True,
            "plugins": [{"name": "next"}],
            "paths": {"@/*": ["./src/*"]},
        },
        "include": ["next-env.d.ts", "**/*.ts", "**/*.tsx", ".next/types/**/*.ts"],
        "exclude": ["node_modules"],
    }
    return json.dumps(tsconfig, indent=2)


def render_tailwind_config(design_system: DesignSystem) -> str:
    """Generate tailwind.config.js content extending the theme with the design tokens."""
    theme_extend = {
        "colors": design_system.colors.model_dump(),
        "fontFamily": {
            "heading": [design_system.typography.heading_font, "sans-serif"],
            "body": [design_system.typography.body_font, "sans-serif"],
        },
        "spacing": design_system.spacing,
        "borderRadius": design_system.border_radius,
        "boxShadow": design_system.shadows,
    }
    extend_js = json.dumps(theme_extend, indent=2).replace("\n", "\n    ")
    return f"""/** @type {{import('tailwindcss').Config}} */
module.exports = {{
  content: ['./src/**/*.{{js,ts,jsx,tsx,mdx}}'],
  theme: {{
    extend: {extend_js},
  }},
  plugins: [],
}};
"""


def render_postcss_config() -> str:
    """Generate postcss.config.js content."""
    return """module.exports = {
  plugins: {
    tailwindcss: {},
    autoprefixer: {},
  },
};
"""


def render_design_system_json(design_system: DesignSystem) -> str:
    """Serialized design tokens; edits parse this file back instead of regenerating."""
    return json.dumps(design_system.model_dump(by_alias=True), indent=2)


def render_scaffold_files(config: GenerationConfig, design_system: DesignSystem) -> List[VirtualFile]:
    """All scaffold files, in the order they are emitted."""
    return [
        VirtualFile(path="package.json", content=render_package_json(config), type="config"),
        VirtualFile(path="next.config.js", content=render_next_config(), type="config"),
        VirtualFile(path="tsconfig.json", content=render_tsconfig(), type="config"),
        VirtualFile(path="tailwind.config.js", content=render_tailwind_config(design_system), type="config"),
        VirtualFile(path="postcss.config.js", content=render_postcss_config(), type="config"),
        VirtualFile(path=DESIGN_SYSTEM_PATH, content=render_design_system_json(design_system), type="data"),
    ]
