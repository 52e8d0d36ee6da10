import logging
import os
import pathlib

from localegen.classes import CompileResult, DiscoveredProject, LocaleInfo, LocaleTranslations
from localegen.config import Config
from localegen.generator import (
    INDEX_MODULE,
    MESSAGES_MODULE,
    generate_index_module,
    generate_locale_module,
    generate_messages_module,
    module_names,
)
from localegen.locales import enumerate_locales, locale_from_path
from localegen.parser import merge_locale_files

logger = logging.getLogger(__name__)

OUTPUT_SUFFIX = ".py"


def write_module(path: pathlib.Path, code: str) -> None:
    # Readers never observe a half-written module.
    temporary = path.with_name(f".{path.name}.tmp")
    try:
        temporary.write_text(code, "utf-8")
        os.replace(temporary, path)
    except Exception:
        temporary.unlink(missing_ok=True)
        raise


class Compiler:
    def __init__(self, config: Config, project_root: str | pathlib.Path):
        self.config = config
        self.project_root = pathlib.Path(project_root)

    @property
    def locales_dir(self) -> pathlib.Path:
        return (self.project_root / self.config.locales_dir).resolve()

    @property
    def output_dir(self) -> pathlib.Path:
        return (self.project_root / self.config.output_dir).resolve()

    def locale_infos(self) -> list[LocaleInfo]:
        return enumerate_locales(self.locales_dir, self.config.layout)

    def read_translations(self) -> dict[str, LocaleTranslations]:
        """Merged key maps of every locale, keyed by locale code."""
        return {
            info.locale: merge_locale_files(info, self.config.layout)
            for info in self.locale_infos()
        }

    def compile(self) -> list[CompileResult]:
        results: list[CompileResult] = []
        locale_infos = self.locale_infos()
        if not locale_infos:
            logger.info(f"No translation files found in {self.locales_dir}")
            return results

        source_info = next(
            (info for info in locale_infos if info.locale == self.config.source_locale), None
        )
        if source_info is None:
            logger.error(f"Source locale not found: {self.config.source_locale}")
            return [
                CompileResult(
                    success=False,
                    output_path="",
                    keys_count=0,
                    errors=[f"Source locale not found: {self.config.source_locale}"],
                )
            ]

        self.output_dir.mkdir(parents=True, exist_ok=True)
        modules = module_names(info.locale for info in locale_infos)

        source = merge_locale_files(source_info, self.config.layout)
        main_result = self._generate_messages(source, list(modules.values()))
        results.append(main_result)

        written: dict[str, str] = {}
        for info in locale_infos:
            translations = source if info is source_info else merge_locale_files(info, self.config.layout)
            result = self._generate_locale(translations, modules[info.locale])
            results.append(result)
            if result.success:
                written[info.locale] = modules[info.locale]

        if main_result.success:
            self._generate_index(written, main_result)

        return results

    def compile_single(self, path: str | pathlib.Path) -> CompileResult:
        """Regenerate the module of the locale that ``path`` belongs to."""
        locale = locale_from_path(path, self.config.layout)
        locale_infos = self.locale_infos()
        info = next((info for info in locale_infos if info.locale == locale), None)
        if info is None:
            return CompileResult(
                success=False, output_path="", keys_count=0, errors=[f"Locale not found: {locale}"]
            )
        self.output_dir.mkdir(parents=True, exist_ok=True)
        modules = module_names(info.locale for info in locale_infos)
        return self._generate_locale(merge_locale_files(info, self.config.layout), modules[locale])

    def _write(self, module: str, code: str, keys_count: int, collisions: int = 0) -> CompileResult:
        output_path = self.output_dir / f"{module}{OUTPUT_SUFFIX}"
        try:
            write_module(output_path, code)
        except (OSError, UnicodeError) as ex:
            logger.error(f"Cannot write {output_path}: {ex}")
            return CompileResult(False, str(output_path), keys_count, [f"Cannot write {output_path}: {ex}"])
        logger.info(f"Generated: {output_path} ({keys_count} keys)")
        return CompileResult(True, str(output_path), keys_count, collisions=collisions)

    def _generate_messages(self, source: LocaleTranslations, modules: list[str]) -> CompileResult:
        keys_count = len(source.translations)
        if source.errors:
            return CompileResult(
                False,
                str(self.output_dir / f"{MESSAGES_MODULE}{OUTPUT_SUFFIX}"),
                keys_count,
                list(source.errors),
                source.collisions,
            )
        code = generate_messages_module(
            source.translations, self.config.source_locale, self.config.interpolation, modules
        )
        return self._write(MESSAGES_MODULE, code, keys_count, source.collisions)

    def _generate_locale(self, translations: LocaleTranslations, module: str) -> CompileResult:
        keys_count = len(translations.translations)
        if translations.errors:
            return CompileResult(
                False,
                str(self.output_dir / f"{module}{OUTPUT_SUFFIX}"),
                keys_count,
                list(translations.errors),
                translations.collisions,
            )
        code = generate_locale_module(translations.locale, translations.translations)
        return self._write(module, code, keys_count, translations.collisions)

    def _generate_index(self, modules: dict[str, str], main_result: CompileResult) -> None:
        output_path = self.output_dir / f"{INDEX_MODULE}{OUTPUT_SUFFIX}"
        try:
            write_module(output_path, generate_index_module(modules))
        except (OSError, UnicodeError) as ex:
            logger.error(f"Cannot write {output_path}: {ex}")
            main_result.success = False
            main_result.errors = [*(main_result.errors or []), f"Cannot write {output_path}: {ex}"]
            return
        logger.info(f"Generated: {output_path}")


def compile_project(project: DiscoveredProject) -> list[CompileResult]:
    return Compiler(project.config, project.path).compile()


def load_translations(project: DiscoveredProject) -> dict[str, LocaleTranslations]:
    return Compiler(project.config, project.path).read_translations()
