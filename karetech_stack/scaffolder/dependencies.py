"""package.json dependency and script resolution.

The generated project starts from a fixed core set of runtime and
development dependencies; each configuration choice then adds, swaps or
removes packages. Versions are pinned to caret ranges.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Mapping

from ..schema import (
    AnalyticsProvider,
    AuthProvider,
    ComponentLibrary,
    DatabaseType,
    EmailProvider,
    ErrorTrackingProvider,
    IconLibrary,
    ProjectConfig,
    TestingFramework,
)

PACKAGE_MANAGER = "bun@1.1.38"
ENGINES: Mapping[str, str] = MappingProxyType({"node": ">=18.0.0", "bun": ">=1.0.0"})

CORE_DEPENDENCIES: Mapping[str, str] = MappingProxyType({
    # Runtime
    "@hono/node-server": "^1.13.1",
    "hono": "^4.6.10",
    "orpc": "^0.0.21",
    # Database
    "drizzle-orm": "^0.36.4",
    "@libsql/client": "^0.14.0",
    "postgres": "^3.4.5",
    # Auth
    "better-auth": "^1.0.1",
    "arctic": "^2.0.0",
    # Frontend
    "@tanstack/react-router": "^1.80.1",
    "@tanstack/react-query": "^5.61.0",
    "react": "^18.3.1",
    "react-dom": "^18.3.1",
    # UI
    "@radix-ui/react-slot": "^1.1.0",
    "@radix-ui/react-toast": "^1.2.2",
    "class-variance-authority": "^0.7.1",
    "clsx": "^2.1.1",
    "tailwind-merge": "^2.5.4",
    "lucide-react": "^0.462.0",
    # Validation and utilities
    "zod": "^3.23.8",
    "dotenv": "^16.4.7",
    "tsx": "^4.19.2",
})

DEV_DEPENDENCIES: Mapping[str, str] = MappingProxyType({
    "@types/node": "^22.9.0",
    "@types/react": "^18.3.12",
    "@types/react-dom": "^18.3.1",
    "typescript": "^5.6.3",
    "vite": "^6.0.1",
    "@vitejs/plugin-react-swc": "^3.7.1",
    "tailwindcss": "^3.4.14",
    "autoprefixer": "^10.4.20",
    "postcss": "^8.4.49",
    "@typescript-eslint/eslint-plugin": "^8.15.0",
    "@typescript-eslint/parser": "^8.15.0",
    "eslint": "^9.15.0",
    "eslint-plugin-react-hooks": "^5.0.0",
    "eslint-plugin-react-refresh": "^0.4.14",
    "drizzle-kit": "^0.30.1",
})

_ICON_PACKAGES: dict[IconLibrary, tuple[str, str]] = {
    IconLibrary.HEROICONS: ("@heroicons/react", "^2.2.0"),
    IconLibrary.PHOSPHOR: ("phosphor-react", "^1.4.1"),
    IconLibrary.HUGEICONS: ("hugeicons-react", "^0.3.0"),
}

_ANALYTICS_PACKAGES: dict[AnalyticsProvider, dict[str, str]] = {
    AnalyticsProvider.VERCEL: {"@vercel/analytics": "^1.3.1"},
    AnalyticsProvider.GOOGLE: {"gtag": "^1.0.1"},
    AnalyticsProvider.UMAMI: {"@umami/node": "^0.68.0"},
}

_EMAIL_PACKAGES: dict[EmailProvider, tuple[dict[str, str], dict[str, str]]] = {
    EmailProvider.RESEND: ({"resend": "^4.0.1"}, {}),
    EmailProvider.SENDGRID: ({"@sendgrid/mail": "^8.1.4"}, {}),
    EmailProvider.NODEMAILER: ({"nodemailer": "^6.9.16"}, {"@types/nodemailer": "^6.4.19"}),
}

_ERROR_TRACKING_PACKAGES: dict[ErrorTrackingProvider, dict[str, str]] = {
    ErrorTrackingProvider.SENTRY: {"@sentry/react": "^8.42.0"},
    ErrorTrackingProvider.BUGSNAG: {"@bugsnag/js": "^8.1.1", "@bugsnag/plugin-react": "^8.1.1"},
    ErrorTrackingProvider.ROLLBAR: {"rollbar": "^2.26.4"},
}


def resolve_dependencies(config: ProjectConfig) -> tuple[dict[str, str], dict[str, str]]:
    """Return ``(dependencies, devDependencies)`` for *config*, sorted by name."""
    deps = dict(CORE_DEPENDENCIES)
    dev = dict(DEV_DEPENDENCIES)

    if config.database is DatabaseType.POSTGRESQL:
        deps["pg"] = "^8.13.1"
        dev["@types/pg"] = "^8.11.10"
        deps.pop("@libsql/client")
    elif config.database is DatabaseType.SQLITE:
        deps["better-sqlite3"] = "^11.3.0"
        dev["@types/better-sqlite3"] = "^7.6.11"
        deps.pop("@libsql/client")
        deps.pop("postgres")
    elif config.database is DatabaseType.NONE:
        for name in ("@libsql/client", "postgres", "drizzle-orm"):
            deps.pop(name)
        dev.pop("drizzle-kit")

    if AuthProvider.OAUTH in config.auth:
        deps["@auth/core"] = "^0.37.2"
    if AuthProvider.GITHUB in config.auth:
        deps["@octokit/rest"] = "^21.0.2"

    if config.component_library is ComponentLibrary.BASE_UI:
        deps["@base-ui/react"] = "^1.0.0"

    if config.icons in _ICON_PACKAGES:
        package, version = _ICON_PACKAGES[config.icons]
        deps[package] = version
        deps.pop("lucide-react")

    if TestingFramework.PLAYWRIGHT in config.testing:
        dev["@playwright/test"] = "^1.48.2"
    if TestingFramework.PUPPETEER in config.testing:
        dev["puppeteer"] = "^23.8.0"
    if TestingFramework.VITEST in config.testing or config.unit_testing:
        dev["vitest"] = "^2.1.5"
        dev["@vitest/ui"] = "^2.1.5"
    if config.unit_testing:
        dev["@testing-library/react"] = "^16.0.1"
        dev["@testing-library/jest-dom"] = "^6.6.3"
        dev["@testing-library/user-event"] = "^14.5.2"

    deps.update(_ANALYTICS_PACKAGES.get(config.analytics, {}))
    email_deps, email_dev = _EMAIL_PACKAGES.get(config.email, ({}, {}))
    deps.update(email_deps)
    dev.update(email_dev)
    deps.update(_ERROR_TRACKING_PACKAGES.get(config.error_tracking, {}))

    if config.feature_flags:
        deps["@vercel/flags"] = "^2.6.0"
    if config.pwa:
        dev["vite-plugin-pwa"] = "^0.21.1"
        dev["workbox-window"] = "^7.3.0"

    return dict(sorted(deps.items())), dict(sorted(dev.items()))


def generate_scripts(config: ProjectConfig) -> dict[str, str]:
    """package.json ``scripts`` for *config*."""
    scripts: dict[str, str] = {
        "dev": "vite",
        "build": "tsc && vite build",
        "preview": "vite preview",
        "lint": "eslint . --ext ts,tsx --report-unused-disable-directives --max-warnings 0",
        "typecheck": "tsc --noEmit",
    }

    if config.database is not DatabaseType.NONE:
        scripts["db:generate"] = "drizzle-kit generate"
        scripts["db:migrate"] = "drizzle-kit migrate"
        scripts["db:studio"] = "drizzle-kit studio"
        scripts["db:push"] = "drizzle-kit push"

    if TestingFramework.PLAYWRIGHT in config.testing:
        scripts["test:e2e"] = "playwright test"
        scripts["test:e2e:ui"] = "playwright test --ui"
    if TestingFramework.PUPPETEER in config.testing:
        scripts["test:e2e:puppeteer"] = "node scripts/e2e-puppeteer.js"
    if TestingFramework.VITEST in config.testing or config.unit_testing:
        scripts["test"] = "vitest"
        scripts["test:ui"] = "vitest --ui"
        scripts["test:coverage"] = "vitest --coverage"
    if config.testing:
        steps = ["bun run typecheck"]
        if "test" in scripts:
            steps.append("bun run test --run")
        if "test:e2e" in scripts:
            steps.append("bun run test:e2e")
        elif "test:e2e:puppeteer" in scripts:
            steps.append("bun run test:e2e:puppeteer")
        scripts["test:all"] = " && ".join(steps)

    if config.docker:
        scripts["docker:build"] = f"docker build -t {config.project_name} ."
        scripts["docker:run"] = f"docker run -p 3000:3000 {config.project_name}"
        scripts["docker:dev"] = "docker compose up --build"

    return scripts


def build_package_json(config: ProjectConfig) -> dict[str, Any]:
    """The complete package.json document for *config*."""
    dependencies, dev_dependencies = resolve_dependencies(config)
    return {
        "name": config.project_name,
        "version": "0.1.0",
        "private": True,
        "description": config.description,
        "author": config.author,
        "type": "module",
        "scripts": generate_scripts(config),
        "dependencies": dependencies,
        "devDependencies": dev_dependencies,
        "engines": dict(ENGINES),
        "packageManager": PACKAGE_MANAGER,
    }
