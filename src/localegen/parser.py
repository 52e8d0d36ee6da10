import json
import logging
import pathlib
from typing import Any

from localegen.classes import LocaleInfo, LocaleTranslations, ParsedTranslations
from localegen.config import FileLayout
from localegen.errors import TranslationParseError
from localegen.locales import namespace_from_path

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "default"


def flatten_translations(data: dict[str, Any], prefix: str = "") -> ParsedTranslations:
    result: ParsedTranslations = {}
    for key, value in data.items():
        full_key = f"{prefix}.{key}" if prefix else key
        if isinstance(value, str):
            result[full_key] = value
        elif isinstance(value, dict):
            result.update(flatten_translations(value, full_key))
    return result


def parse_translation_file(path: str | pathlib.Path) -> ParsedTranslations:
    path = pathlib.Path(path)
    logger.debug(f"Parsing {path}")
    try:
        data = json.loads(path.read_text("utf-8"))
    except OSError as ex:
        raise TranslationParseError(str(path), ex.strerror or str(ex)) from ex
    except (json.JSONDecodeError, UnicodeDecodeError) as ex:
        raise TranslationParseError(str(path), str(ex)) from ex

    if not isinstance(data, dict):
        raise TranslationParseError(str(path), "top level value is not an object")

    translations = flatten_translations(data)
    for key, value in translations.items():
        try:
            key.encode("utf-8")
            value.encode("utf-8")
        except UnicodeEncodeError as ex:
            raise TranslationParseError(str(path), f"{key} is not valid UTF-8 text: {ex.reason}") from ex
    return translations


def merge_locale_files(locale_info: LocaleInfo, layout: FileLayout = "flat") -> LocaleTranslations:
    merged = LocaleTranslations(locale_info.locale)
    for file in locale_info.files:
        try:
            translations = parse_translation_file(file)
        except TranslationParseError as ex:
            logger.error(str(ex))
            merged.errors.append(str(ex))
            continue

        namespace = namespace_from_path(file)
        prefixed = layout == "namespaced" and namespace != DEFAULT_NAMESPACE
        for key, value in translations.items():
            full_key = f"{namespace}.{key}" if prefixed else key
            if full_key in merged.translations:
                merged.collisions += 1
                logger.debug(f"{locale_info.locale}: {file.name} overrides {full_key}")
            merged.translations[full_key] = value

    if merged.collisions:
        logger.warning(f"{locale_info.locale}: {merged.collisions} duplicate keys, later files win")
    return merged
