import importlib.util
import itertools
import json
import pathlib
import sys

import pytest

_package_ids = itertools.count()


def write_json(path: pathlib.Path, data) -> pathlib.Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), "utf-8")
    return path


def import_generated(output_dir: pathlib.Path):
    """Import a generated output directory as a uniquely named package."""
    name = f"generated_i18n_{next(_package_ids)}"
    spec = importlib.util.spec_from_file_location(
        name, output_dir / "__init__.py", submodule_search_locations=[str(output_dir)]
    )
    module = importlib.util.module_from_spec(spec)
    sys.modules[name] = module
    spec.loader.exec_module(module)
    return module


def import_module_file(path: pathlib.Path):
    name = f"generated_module_{next(_package_ids)}"
    spec = importlib.util.spec_from_file_location(name, path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def flat_project(tmp_path):
    write_json(tmp_path / "localegen.config.json", {"sourceLocale": "en", "targetLocales": ["es"]})
    write_json(
        tmp_path / "locales" / "en.json",
        {
            "hello": "Hello",
            "welcome": "Welcome, {name}!",
            "inbox": {"unread": "You have {count, plural, one {# message} other {# messages}}"},
        },
    )
    write_json(
        tmp_path / "locales" / "es.json",
        {"hello": "Hola", "welcome": "¡Bienvenido, {name}!"},
    )
    return tmp_path


@pytest.fixture
def namespaced_project(tmp_path):
    write_json(tmp_path / "localegen.config.json", {"sourceLocale": "en", "layout": "namespaced"})
    write_json(tmp_path / "locales" / "en" / "default.json", {"a": "1"})
    write_json(tmp_path / "locales" / "en" / "common.json", {"b": "2"})
    write_json(tmp_path / "locales" / "fr" / "default.json", {"a": "un"})
    return tmp_path
