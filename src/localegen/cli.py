import json
import logging
import os
import sys
import threading
from typing import Any

import click
import yaml

from localegen import compiler, discovery, watcher
from localegen.classes import CompileResult
from localegen.config import DEFAULT_CONFIG, load_config, save_config
from localegen.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_LOGGING = {
    "level": "INFO",
    "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
    "datefmt": "%H:%M:%S",
}

EXAMPLE_MESSAGES = {
    "hello": "Hello",
    "welcome": "Welcome, {name}!",
    "items_count": "{count, plural, one {# item} other {# items}}",
}


def configure_logging(config_folder: str) -> None:
    config_file_path = os.path.abspath(f"{config_folder}/config.yml")

    config: dict[str, Any] = {}
    try:
        with open(config_file_path, "r") as file:
            config = yaml.safe_load(file) or {}
    except FileNotFoundError:
        pass
    except yaml.YAMLError as exc:
        click.echo(f"Invalid logging configuration {config_file_path}: {exc}", err=True)
        sys.exit(1)

    logging_cfg = {**DEFAULT_LOGGING, **(config.get("logging") or {})}
    logging.basicConfig(
        level=logging.getLevelName(logging_cfg["level"]),
        format=logging_cfg["format"],
        datefmt=logging_cfg["datefmt"],
    )


def print_results(results: list[CompileResult]) -> None:
    success_count = sum(1 for result in results if result.success)
    total_keys = sum(result.keys_count for result in results)
    click.echo(f"Generated {success_count} files with {total_keys} keys")
    for result in results:
        if result.success:
            click.echo(f"  {result.output_path}")
        else:
            click.echo(f"  x {result.output_path or '(no output)'}")
            for error in result.errors or []:
                click.echo(f"    {error}")


def wait_for_interrupt(active: watcher.TranslationWatcher) -> None:
    click.echo("Press Ctrl+C to stop")
    try:
        threading.Event().wait()
    except KeyboardInterrupt:
        click.echo("Stopping...")
    finally:
        active.stop()


@click.group()
@click.option("--config-folder", default="config", help="Folder holding config.yml with logging settings.")
@click.version_option()
def cli(config_folder: str) -> None:
    configure_logging(config_folder)


@cli.command("build")
@click.option("--project-root", default=".", type=click.Path(file_okay=False), help="Project root folder.")
@click.option("--watch", is_flag=True, help="Recompile whenever a translation file changes.")
def build(project_root: str, watch: bool) -> None:
    try:
        config = load_config(project_root)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    if watch:
        active = watcher.TranslationWatcher(
            config,
            project_root,
            on_compile=print_results,
            on_error=lambda error: click.echo(f"Error: {error}", err=True),
        )
        active.start()
        wait_for_interrupt(active)
        return

    results = compiler.Compiler(config, project_root).compile()
    print_results(results)
    if any(not result.success for result in results):
        sys.exit(1)


@cli.command("watch")
@click.option("--workspace", default=".", type=click.Path(file_okay=False), help="Workspace root folder.")
@click.option("--project", "project_ref", default=None, help="Project id or name to watch.")
def watch(workspace: str, project_ref: str | None) -> None:
    project = discovery.get_default_project(workspace)
    if project is None:
        raise click.ClickException("No localegen projects found, run `localegen init` first")

    if project_ref:
        found = discovery.find_project(workspace, project_ref)
        if found is None:
            click.echo(f'Project "{project_ref}" not found, using {project.name}')
        else:
            project = found

    def on_compile(results: list[CompileResult]) -> None:
        success_count = sum(1 for result in results if result.success)
        click.echo(f"[{project.name}] Compiled {success_count} files")

    active = watcher.start_watch(
        project, on_compile, lambda error: click.echo(f"Error: {error}", err=True)
    )
    wait_for_interrupt(active)


@cli.command("projects")
@click.option("--workspace", default=".", type=click.Path(file_okay=False), help="Workspace root folder.")
@click.option("--json", "as_json", is_flag=True, help="Print projects as JSON.")
def projects(workspace: str, as_json: bool) -> None:
    found = discovery.discover_projects(workspace)
    if as_json:
        click.echo(
            json.dumps(
                [
                    {
                        "id": project.id,
                        "name": project.name,
                        "path": str(project.path),
                        "configPath": str(project.config_path),
                        "config": project.config.to_document(),
                    }
                    for project in found
                ],
                indent=2,
            )
        )
        return

    if not found:
        click.echo("No localegen projects found")
        return
    for project in found:
        location = "./" if project.is_root else project.id
        targets = ", ".join(project.config.target_locales) or "none"
        click.echo(f"{project.name} ({location}) - {project.config.source_locale} -> {targets}")


@cli.command("packages")
@click.option("--workspace", default=".", type=click.Path(file_okay=False), help="Workspace root folder.")
def packages(workspace: str) -> None:
    root = os.path.abspath(workspace)
    for package in discovery.find_workspace_packages(root):
        click.echo(os.path.relpath(package, root))


@cli.command("init")
@click.option("--locale", default=DEFAULT_CONFIG.source_locale, help="Source locale code.")
@click.option("--dir", "locales_dir", default=DEFAULT_CONFIG.locales_dir, help="Locales folder.")
@click.option("--project-root", default=".", type=click.Path(file_okay=False), help="Project root folder.")
def init(locale: str, locales_dir: str, project_root: str) -> None:
    config = DEFAULT_CONFIG.model_copy(update={"source_locale": locale, "locales_dir": locales_dir})
    config_path = save_config(project_root, config)
    click.echo(f"Created {os.path.relpath(config_path, project_root)}")

    locales_path = os.path.join(project_root, locales_dir)
    os.makedirs(locales_path, exist_ok=True)
    click.echo(f"Created {locales_dir}/")

    source_file = os.path.join(locales_path, f"{locale}.json")
    if not os.path.exists(source_file):
        with open(source_file, "w", encoding="utf-8") as file:
            json.dump(EXAMPLE_MESSAGES, file, indent=2)
            file.write("\n")
        click.echo(f"Created {locales_dir}/{locale}.json with example keys")

    os.makedirs(os.path.join(project_root, config.output_dir), exist_ok=True)
    click.echo(f"Created {config.output_dir}/")
