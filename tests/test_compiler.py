import pathlib

import pytest
from conftest import import_generated, import_module_file, write_json

from localegen.compiler import Compiler, compile_project, load_translations, write_module
from localegen.config import load_config
from localegen.discovery import discover_projects
from localegen.parser import merge_locale_files


def output_names(results):
    return [pathlib.Path(result.output_path).stem for result in results]


def test_locale_discovery_scenario(tmp_path):
    write_json(tmp_path / "locales" / "en.json", {"hello": "Hello", "welcome": "Welcome, {name}!"})
    write_json(tmp_path / "locales" / "es.json", {"hello": "Hola"})
    write_json(tmp_path / "localegen.config.json", {"sourceLocale": "en", "targetLocales": ["es"]})

    projects = discover_projects(tmp_path)
    assert len(projects) == 1

    results = compile_project(projects[0])

    assert output_names(results) == ["messages", "en", "es"]
    assert all(result.success for result in results)
    assert results[0].keys_count == 2
    assert results[1].keys_count == 2
    assert results[2].keys_count == 1
    output = tmp_path / "src" / "generated" / "i18n"
    assert (output / "__init__.py").is_file()


def test_generated_key_sets_match_merged_translations(flat_project):
    compiler = Compiler(load_config(flat_project), flat_project)

    results = compiler.compile()

    translations = compiler.read_translations()
    for result in results[1:]:
        module = import_module_file(pathlib.Path(result.output_path))
        assert set(module.messages) == set(translations[module.LOCALE].translations)


def test_generated_package_imports(flat_project):
    compiler = Compiler(load_config(flat_project), flat_project)
    compiler.compile()

    package = import_generated(compiler.output_dir)

    assert package.AVAILABLE_LOCALES == ("en", "es")
    assert package.welcome(name="Ada") == "Welcome, Ada!"
    assert "inbox.unread" in package.MESSAGE_FUNCTIONS


def test_missing_source_locale_writes_nothing(tmp_path):
    write_json(tmp_path / "locales" / "es.json", {"hello": "Hola"})
    write_json(tmp_path / "localegen.config.json", {"sourceLocale": "en"})
    compiler = Compiler(load_config(tmp_path), tmp_path)

    results = compiler.compile()

    assert len(results) == 1
    assert not results[0].success
    assert results[0].errors == ["Source locale not found: en"]
    assert not compiler.output_dir.exists()


def test_no_locales(tmp_path):
    compiler = Compiler(load_config(tmp_path), tmp_path)

    assert compiler.compile() == []


def test_bad_target_locale_degrades_only_that_locale(flat_project):
    (flat_project / "locales" / "fr.json").write_text("{broken")
    compiler = Compiler(load_config(flat_project), flat_project)

    results = compiler.compile()

    by_name = {pathlib.Path(result.output_path).stem: result for result in results}
    assert by_name["messages"].success
    assert by_name["en"].success
    assert by_name["es"].success
    assert not by_name["fr"].success
    assert "fr.json" in by_name["fr"].errors[0]
    assert not (compiler.output_dir / "fr.py").exists()
    index = (compiler.output_dir / "__init__.py").read_text()
    assert '"fr"' not in index
    assert '"es"' in index


def test_bad_source_locale_fails_messages(flat_project):
    (flat_project / "locales" / "en.json").write_text("[1, 2")
    compiler = Compiler(load_config(flat_project), flat_project)

    results = compiler.compile()

    assert not results[0].success
    assert not (compiler.output_dir / "messages.py").exists()
    assert not (compiler.output_dir / "__init__.py").exists()
    assert (compiler.output_dir / "es.py").exists()


def test_namespaced_project(namespaced_project):
    compiler = Compiler(load_config(namespaced_project), namespaced_project)

    results = compiler.compile()

    assert output_names(results) == ["messages", "en", "fr"]
    assert results[0].keys_count == 2
    package = import_generated(compiler.output_dir)
    assert package.en.messages == {"a": "1", "common.b": "2"}
    assert package.common_b() == "2"


def test_collisions_reported(tmp_path):
    write_json(tmp_path / "localegen.config.json", {"layout": "namespaced"})
    write_json(tmp_path / "locales" / "en" / "common.json", {"b": "x"})
    write_json(tmp_path / "locales" / "en" / "default.json", {"common": {"b": "y"}})
    compiler = Compiler(load_config(tmp_path), tmp_path)

    results = compiler.compile()

    assert results[0].collisions == 1
    assert compiler.read_translations()["en"].translations == {"common.b": "y"}


def test_recompile_overwrites(flat_project):
    compiler = Compiler(load_config(flat_project), flat_project)
    compiler.compile()
    write_json(flat_project / "locales" / "es.json", {"hello": "Buenas"})

    compiler.compile()

    module = import_module_file(compiler.output_dir / "es.py")
    assert module.messages == {"hello": "Buenas"}
    assert not list(compiler.output_dir.glob(".*.tmp"))


def test_compile_single(flat_project):
    compiler = Compiler(load_config(flat_project), flat_project)

    result = compiler.compile_single(flat_project / "locales" / "es.json")

    assert result.success
    assert result.keys_count == 2
    assert pathlib.Path(result.output_path).name == "es.py"


def test_compile_single_unknown_locale(flat_project):
    compiler = Compiler(load_config(flat_project), flat_project)

    result = compiler.compile_single(flat_project / "locales" / "de.json")

    assert not result.success


def test_locale_module_names_are_identifiers(tmp_path):
    write_json(tmp_path / "localegen.config.json", {"sourceLocale": "en-US"})
    write_json(tmp_path / "locales" / "en-US.json", {"hello": "Hello"})
    write_json(tmp_path / "locales" / "pt-BR.json", {"hello": "Olá"})
    compiler = Compiler(load_config(tmp_path), tmp_path)

    results = compiler.compile()

    assert output_names(results) == ["messages", "en_US", "pt_BR"]
    package = import_generated(compiler.output_dir)
    assert package.AVAILABLE_LOCALES == ("en-US", "pt-BR")
    assert package.pt_BR.LOCALE == "pt-BR"


def test_load_translations(flat_project):
    project = discover_projects(flat_project)[0]

    translations = load_translations(project)

    assert set(translations) == {"en", "es"}
    source = set(translations["en"].translations)
    target = set(translations["es"].translations)
    assert source - target == {"inbox.unread"}


def test_merge_matches_compiler(namespaced_project):
    compiler = Compiler(load_config(namespaced_project), namespaced_project)
    info = compiler.locale_infos()[0]

    assert merge_locale_files(info, "namespaced").translations == {"a": "1", "common.b": "2"}


def test_keys_named_like_locales(tmp_path):
    write_json(tmp_path / "localegen.config.json", {"sourceLocale": "en"})
    write_json(tmp_path / "locales" / "en.json", {"en": "English", "es": "Spanish"})
    write_json(tmp_path / "locales" / "es.json", {"en": "Inglés", "es": "Español"})
    compiler = Compiler(load_config(tmp_path), tmp_path)

    assert all(result.success for result in compiler.compile())

    package = import_generated(compiler.output_dir)
    assert package.es.LOCALE == "es"
    assert package.es_() == "Spanish"
    package.set_locale("es")
    assert package.en_() == "Inglés"


def test_unencodable_value_fails_only_that_locale(flat_project):
    (flat_project / "locales" / "es.json").write_text('{"hello": "bad \\ud800"}')
    compiler = Compiler(load_config(flat_project), flat_project)

    results = compiler.compile()

    by_name = {pathlib.Path(result.output_path).stem: result for result in results}
    assert by_name["messages"].success
    assert by_name["en"].success
    assert not by_name["es"].success
    assert (compiler.output_dir / "__init__.py").is_file()
    assert not list(compiler.output_dir.glob(".*.tmp"))


def test_write_module_removes_temporary_file_on_failure(tmp_path):
    with pytest.raises(UnicodeEncodeError):
        write_module(tmp_path / "es.py", "bad \ud800")

    assert list(tmp_path.iterdir()) == []
