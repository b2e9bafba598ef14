"""Static catalogs of detectable languages, frameworks, databases and tools."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Tuple, TypeVar

import yaml

from .config import ConfigError
from .models import (
    DATABASE_CATEGORIES,
    FRAMEWORK_CATEGORIES,
    TOOL_CATEGORIES,
    DatabaseConfig,
    FrameworkConfig,
    LanguageConfig,
    ToolConfig,
)


class CatalogError(ConfigError):
    """Raised when a catalog override file contains invalid entries."""


_JS_EXCLUDES = ("node_modules", ".git", "dist", "build", "coverage")
_GO_EXCLUDES = ("vendor", ".git", "bin", "pkg")
_DART_EXCLUDES = (".git", "build", ".dart_tool", "android", "ios")

LANGUAGES: Mapping[str, LanguageConfig] = MappingProxyType(
    {
        "js": LanguageConfig("JavaScript", (".js", ".jsx", ".mjs"), _JS_EXCLUDES),
        "ts": LanguageConfig("TypeScript", (".ts", ".tsx", ".mts"), _JS_EXCLUDES),
        "py": LanguageConfig(
            "Python", (".py", ".ipynb"), ("__pycache__", ".git", "venv", "env", ".pytest_cache")
        ),
        "go": LanguageConfig("Go", (".go",), _GO_EXCLUDES),
        "java": LanguageConfig("Java", (".java",), (".git", "target", "build", "out", "bin")),
        "c": LanguageConfig("C", (".c", ".h"), (".git", "build", "dist", "obj")),
        "html": LanguageConfig(
            "HTML",
            (
                ".html",
                ".htm",
                ".ejs",
                ".j2",
                ".jinja",
                ".jinja2",
                ".njk",
                ".hbs",
                ".handlebars",
                ".pug",
                ".jade",
            ),
            (".git", "node_modules", "dist", "build"),
        ),
        "css": LanguageConfig(
            "CSS", (".css", ".scss", ".sass", ".less"), (".git", "node_modules", "dist", "build")
        ),
        "dart": LanguageConfig("Dart", (".dart",), _DART_EXCLUDES),
    }
)

FRAMEWORKS: Mapping[str, FrameworkConfig] = MappingProxyType(
    {
        "reactNext": FrameworkConfig(
            "React/Next.js", (".jsx", ".tsx"), ("react", "@types/react", "next"), "frontend"
        ),
        "express": FrameworkConfig("Express", (".js", ".ts"), ("express", "@types/express"), "backend"),
        "flask": FrameworkConfig("Flask", (".py",), ("flask", "Flask"), "backend"),
        "django": FrameworkConfig("Django", (".py",), ("django", "Django"), "backend"),
        "fastapi": FrameworkConfig("FastAPI", (".py",), ("fastapi", "FastAPI"), "backend"),
        "gofiber": FrameworkConfig("Go Fiber", (".go",), ("github.com/gofiber/fiber",), "backend"),
        "gin": FrameworkConfig("Gin", (".go",), ("github.com/gin-gonic/gin",), "backend"),
        "echo": FrameworkConfig("Echo", (".go",), ("github.com/labstack/echo",), "backend"),
        "flutter": FrameworkConfig("Flutter", (".dart",), ("flutter",), "frontend"),
    }
)

DATABASES: Mapping[str, DatabaseConfig] = MappingProxyType(
    {
        "postgresql": DatabaseConfig(
            "PostgreSQL", ("pg", "postgres", "postgresql", "psycopg2", "postgresql-client"), "sql"
        ),
        "mysql": DatabaseConfig(
            "MySQL", ("mysql", "mysql2", "pymysql", "mysql-connector-python"), "sql"
        ),
        "sqlite": DatabaseConfig("SQLite", ("sqlite3", "better-sqlite3", "sqlite"), "sql"),
        "sqlserver": DatabaseConfig("SQL Server", ("mssql", "sqlserver", "pyodbc"), "sql"),
        "mongodb": DatabaseConfig(
            "MongoDB", ("mongodb", "mongoose", "pymongo", "mongo-go-driver"), "nosql"
        ),
        "redis": DatabaseConfig("Redis", ("redis", "ioredis", "redis-py", "go-redis"), "nosql"),
        "elasticsearch": DatabaseConfig(
            "Elasticsearch", ("elasticsearch", "@elastic/elasticsearch", "elasticsearch-py"), "nosql"
        ),
        "prisma": DatabaseConfig("Prisma", ("prisma", "@prisma/client"), "orm"),
        "sequelize": DatabaseConfig("Sequelize", ("sequelize", "sequelize-cli"), "orm"),
        "typeorm": DatabaseConfig("TypeORM", ("typeorm", "@nestjs/typeorm"), "orm"),
        "sqlalchemy": DatabaseConfig("SQLAlchemy", ("sqlalchemy", "flask-sqlalchemy"), "orm"),
        "gorm": DatabaseConfig("GORM", ("gorm.io/gorm", "gorm.io/driver"), "orm"),
        "ent": DatabaseConfig("Ent", ("entgo.io/ent",), "orm"),
    }
)

TOOLS: Mapping[str, ToolConfig] = MappingProxyType(
    {
        # DevOps
        "docker": ToolConfig(
            "Docker",
            ("Dockerfile", ".dockerignore", "docker-compose.yml", "docker-compose.yaml"),
            ("docker", "@types/docker"),
            "devops",
        ),
        "kubernetes": ToolConfig(
            "Kubernetes",
            ("k8s/", "kubernetes/", "deployment.yaml", "deployment.yml", "service.yaml", "service.yml"),
            ("kubernetes", "@kubernetes/client-node", "kubectl"),
            "devops",
        ),
        "terraform": ToolConfig("Terraform", (".tf", ".tfvars"), ("terraform",), "devops"),
        "ansible": ToolConfig(
            "Ansible", ("playbook.yml", "inventory.yml", "ansible.cfg"), ("ansible",), "devops"
        ),
        # Cloud
        "aws": ToolConfig(
            "AWS",
            ("cloudformation/", "aws-lambda/", "serverless.yml"),
            ("aws-sdk", "@aws-sdk/client-", "boto3", "botocore"),
            "cloud",
        ),
        "azure": ToolConfig(
            "Azure",
            ("azure-pipelines.yml", "azuredeploy.json"),
            ("@azure/ms-rest-js", "@azure/identity", "azure-mgmt-", "azure-storage-"),
            "cloud",
        ),
        "gcp": ToolConfig(
            "Google Cloud",
            ("cloudbuild.yaml", "app.yaml"),
            ("@google-cloud/", "google-cloud-", "google-auth"),
            "cloud",
        ),
        "heroku": ToolConfig("Heroku", ("Procfile", "app.json", "heroku.yml"), ("heroku",), "cloud"),
        # CI/CD
        "githubActions": ToolConfig(
            "GitHub Actions",
            (".github/workflows/", ".github/actions/"),
            ("@actions/core", "@actions/github"),
            "cicd",
        ),
        "gitlabCI": ToolConfig("GitLab CI", (".gitlab-ci.yml",), (), "cicd"),
        "jenkins": ToolConfig("Jenkins", ("Jenkinsfile",), ("jenkins",), "cicd"),
        "circleci": ToolConfig("CircleCI", (".circleci/config.yml",), (), "cicd"),
        "travisCI": ToolConfig("Travis CI", (".travis.yml",), (), "cicd"),
        # Monitoring & testing
        "prometheus": ToolConfig(
            "Prometheus", ("prometheus.yml", "prometheus.yaml"), ("prometheus", "prom-client"), "monitoring"
        ),
        "grafana": ToolConfig("Grafana", ("grafana.ini", "provisioning/"), ("grafana",), "monitoring"),
        "jest": ToolConfig(
            "Jest", ("jest.config.js", "jest.config.ts"), ("jest", "@types/jest"), "testing"
        ),
        "pytest": ToolConfig("pytest", ("pytest.ini", "conftest.py"), ("pytest",), "testing"),
        "cypress": ToolConfig("Cypress", ("cypress.config.js", "cypress/"), ("cypress",), "testing"),
    }
)


@dataclass(frozen=True)
class Catalog:
    """Bundle of the four catalogs passed by reference into every component."""

    languages: Mapping[str, LanguageConfig]
    frameworks: Mapping[str, FrameworkConfig]
    databases: Mapping[str, DatabaseConfig]
    tools: Mapping[str, ToolConfig]

    def names(self) -> Dict[str, Dict[str, str]]:
        """Return id -> display name tables for each catalog."""
        return {
            "languages": {key: entry.name for key, entry in self.languages.items()},
            "frameworks": {key: entry.name for key, entry in self.frameworks.items()},
            "databases": {key: entry.name for key, entry in self.databases.items()},
            "tools": {key: entry.name for key, entry in self.tools.items()},
        }


DEFAULT_CATALOG = Catalog(
    languages=LANGUAGES,
    frameworks=FRAMEWORKS,
    databases=DATABASES,
    tools=TOOLS,
)


def load_catalog(path: Path | None = None) -> Catalog:
    """Return the built-in catalog, merged with entries from an optional YAML file.

    Entries in the override file replace built-in entries with the same id;
    new ids are appended after the built-in ones.
    """
    if path is None:
        return DEFAULT_CATALOG

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise CatalogError(f"Unable to read catalog file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise CatalogError(f"Failed to parse {path.name}: {exc}") from exc

    if data is None:
        return DEFAULT_CATALOG
    if not isinstance(data, dict):
        raise CatalogError(f"{path.name} must contain a mapping at the root")

    return Catalog(
        languages=_merge(LANGUAGES, data.get("languages"), _language_entry, "languages"),
        frameworks=_merge(FRAMEWORKS, data.get("frameworks"), _framework_entry, "frameworks"),
        databases=_merge(DATABASES, data.get("databases"), _database_entry, "databases"),
        tools=_merge(TOOLS, data.get("tools"), _tool_entry, "tools"),
    )


_Entry = TypeVar("_Entry")


def _merge(
    base: Mapping[str, _Entry],
    overrides: Any,
    build: Callable[[str, Dict[str, Any]], _Entry],
    section: str,
) -> Mapping[str, _Entry]:
    if overrides is None:
        return base
    if not isinstance(overrides, dict):
        raise CatalogError(f"'{section}' must be a mapping of id -> entry")

    merged: Dict[str, _Entry] = dict(base)
    for key, raw in overrides.items():
        if not isinstance(raw, dict):
            raise CatalogError(f"{section}.{key} must be a mapping")
        merged[str(key)] = build(f"{section}.{key}", raw)
    return MappingProxyType(merged)


def _language_entry(label: str, raw: Dict[str, Any]) -> LanguageConfig:
    return LanguageConfig(
        name=_require_name(label, raw),
        extensions=_patterns(label, raw, "extensions", required=True),
        exclude_patterns=_patterns(label, raw, "exclude_patterns"),
    )


def _framework_entry(label: str, raw: Dict[str, Any]) -> FrameworkConfig:
    return FrameworkConfig(
        name=_require_name(label, raw),
        file_patterns=_patterns(label, raw, "file_patterns"),
        package_patterns=_patterns(label, raw, "package_patterns"),
        category=_category(label, raw, FRAMEWORK_CATEGORIES),
        exclude_patterns=_patterns(label, raw, "exclude_patterns"),
    )


def _database_entry(label: str, raw: Dict[str, Any]) -> DatabaseConfig:
    return DatabaseConfig(
        name=_require_name(label, raw),
        package_patterns=_patterns(label, raw, "package_patterns", required=True),
        category=_category(label, raw, DATABASE_CATEGORIES),
    )


def _tool_entry(label: str, raw: Dict[str, Any]) -> ToolConfig:
    return ToolConfig(
        name=_require_name(label, raw),
        file_patterns=_patterns(label, raw, "file_patterns"),
        package_patterns=_patterns(label, raw, "package_patterns"),
        category=_category(label, raw, TOOL_CATEGORIES),
    )


def _require_name(label: str, raw: Dict[str, Any]) -> str:
    name = raw.get("name")
    if not isinstance(name, str) or not name.strip():
        raise CatalogError(f"{label} requires a non-empty 'name'")
    return name


def _patterns(label: str, raw: Dict[str, Any], key: str, *, required: bool = False) -> Tuple[str, ...]:
    value = raw.get(key)
    if value is None:
        if required:
            raise CatalogError(f"{label} requires '{key}'")
        return ()
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise CatalogError(f"{label}.{key} must be a list of strings")
    if required and not value:
        raise CatalogError(f"{label}.{key} must not be empty")
    return tuple(value)


def _category(label: str, raw: Dict[str, Any], allowed: Tuple[str, ...]) -> str:
    category = raw.get("category")
    if category not in allowed:
        raise CatalogError(f"{label}.category must be one of: {', '.join(allowed)}")
    return category


__all__ = [
    "Catalog",
    "CatalogError",
    "DATABASES",
    "DEFAULT_CATALOG",
    "FRAMEWORKS",
    "LANGUAGES",
    "TOOLS",
    "load_catalog",
]
