"""Locating projects in a workspace.

A project is any directory holding one of the configuration files listed in
``localegen.config.CONFIG_FILE_NAMES``. Discovery never caches: every call
walks the workspace again.
"""

import json
import logging
import os
import pathlib
import tomllib
from typing import Any

import yaml

from localegen.classes import DiscoveredProject
from localegen.config import CONFIG_FILE_NAMES, read_config_file
from localegen.errors import ConfigError

logger = logging.getLogger(__name__)

ROOT_PROJECT_ID = "root"
ROOT_PROJECT_NAME = "Root Project"

IGNORED_DIRECTORIES = {
    "node_modules",
    "dist",
    "build",
    "coverage",
    ".git",
    ".venv",
    "venv",
    "__pycache__",
}


def _read_json(path: pathlib.Path) -> Any:
    return json.loads(path.read_text("utf-8"))


def manifest_name(project_path: pathlib.Path) -> str | None:
    package_json = project_path / "package.json"
    if package_json.is_file():
        try:
            name = _read_json(package_json).get("name")
        except (OSError, ValueError, AttributeError) as ex:
            logger.debug(f"Ignoring unreadable {package_json}: {ex}")
        else:
            if isinstance(name, str) and name:
                return name

    pyproject = project_path / "pyproject.toml"
    if pyproject.is_file():
        try:
            with open(pyproject, "rb") as file:
                name = tomllib.load(file).get("project", {}).get("name")
        except (OSError, tomllib.TOMLDecodeError, AttributeError) as ex:
            logger.debug(f"Ignoring unreadable {pyproject}: {ex}")
        else:
            if isinstance(name, str) and name:
                return name

    return None


def project_name(workspace_root: pathlib.Path, project_path: pathlib.Path) -> str:
    name = manifest_name(project_path)
    if name:
        return name
    if project_path == workspace_root:
        return ROOT_PROJECT_NAME
    last_part = project_path.name
    if not last_part:
        return "Project"
    return last_part[0].upper() + last_part[1:]


def project_id(workspace_root: pathlib.Path, project_path: pathlib.Path) -> str:
    relative = project_path.relative_to(workspace_root).as_posix()
    return ROOT_PROJECT_ID if relative == "." else relative


def _depth(project: DiscoveredProject) -> int:
    return 0 if project.is_root else len(project.id.split("/"))


def _config_files(workspace_root: pathlib.Path):
    for directory, subdirectories, files in os.walk(workspace_root):
        subdirectories[:] = sorted(d for d in subdirectories if d not in IGNORED_DIRECTORIES)
        for file_name in CONFIG_FILE_NAMES:
            if file_name in files:
                yield pathlib.Path(directory) / file_name
                break


def discover_projects(workspace_root: str | pathlib.Path) -> list[DiscoveredProject]:
    workspace_root = pathlib.Path(workspace_root).resolve()
    projects: list[DiscoveredProject] = []
    seen: set[pathlib.Path] = set()

    for config_path in _config_files(workspace_root):
        project_path = config_path.parent
        resolved = project_path.resolve()
        if resolved in seen:
            logger.debug(f"Skipping {config_path}, project already discovered")
            continue

        try:
            config = read_config_file(config_path)
        except ConfigError as ex:
            logger.warning(f"Warning: Invalid config at {config_path}: {ex}")
            continue

        seen.add(resolved)
        projects.append(
            DiscoveredProject(
                id=project_id(workspace_root, project_path),
                name=project_name(workspace_root, project_path),
                path=project_path,
                config_path=config_path,
                config=config,
            )
        )

    projects.sort(key=lambda project: (_depth(project), project.id))
    logger.debug(f"Discovered {len(projects)} projects in {workspace_root}")
    return projects


def find_project(workspace_root: str | pathlib.Path, project: str) -> DiscoveredProject | None:
    return next(
        (p for p in discover_projects(workspace_root) if project in (p.id, p.name)), None
    )


def get_default_project(workspace_root: str | pathlib.Path) -> DiscoveredProject | None:
    projects = discover_projects(workspace_root)
    return projects[0] if projects else None


def _workspace_patterns(workspace_root: pathlib.Path) -> list[str]:
    patterns: list[str] = []

    pnpm_workspace = workspace_root / "pnpm-workspace.yaml"
    if pnpm_workspace.is_file():
        try:
            data = yaml.safe_load(pnpm_workspace.read_text("utf-8")) or {}
        except (OSError, yaml.YAMLError) as ex:
            logger.warning(f"Cannot read {pnpm_workspace}: {ex}")
        else:
            if isinstance(data, dict):
                patterns.extend(p for p in data.get("packages") or [] if isinstance(p, str))

    package_json = workspace_root / "package.json"
    if package_json.is_file():
        try:
            workspaces = _read_json(package_json).get("workspaces")
        except (OSError, ValueError, AttributeError) as ex:
            logger.warning(f"Cannot read {package_json}: {ex}")
        else:
            if isinstance(workspaces, dict):
                workspaces = workspaces.get("packages")
            if isinstance(workspaces, list):
                patterns.extend(p for p in workspaces if isinstance(p, str))

    return patterns


def _glob_directories(workspace_root: pathlib.Path, pattern: str) -> set[pathlib.Path]:
    pattern = pattern.strip().removeprefix("./").rstrip("/")
    if not pattern:
        return set()
    return {
        path.resolve()
        for path in workspace_root.glob(pattern)
        if path.is_dir() and "node_modules" not in path.relative_to(workspace_root).parts
    }


def find_workspace_packages(workspace_root: str | pathlib.Path) -> list[pathlib.Path]:
    """Package directories declared by pnpm-workspace.yaml or package.json workspaces."""
    workspace_root = pathlib.Path(workspace_root).resolve()
    included: set[pathlib.Path] = set()
    excluded: set[pathlib.Path] = set()

    for pattern in _workspace_patterns(workspace_root):
        if pattern.startswith("!"):
            excluded |= _glob_directories(workspace_root, pattern[1:])
        else:
            included |= _glob_directories(workspace_root, pattern)

    return sorted(included - excluded)
