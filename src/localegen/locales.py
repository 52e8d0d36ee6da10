import logging
import pathlib

from localegen.classes import LocaleInfo
from localegen.config import FileLayout

logger = logging.getLogger(__name__)

TRANSLATION_SUFFIX = ".json"


def _translation_files(path: pathlib.Path) -> list[pathlib.Path]:
    return sorted(
        file for file in path.iterdir() if file.is_file() and file.suffix == TRANSLATION_SUFFIX
    )


def _flat_locales(locales_dir: pathlib.Path) -> list[LocaleInfo]:
    return [LocaleInfo(file.stem, [file]) for file in _translation_files(locales_dir)]


def _namespaced_locales(locales_dir: pathlib.Path) -> list[LocaleInfo]:
    locales = []
    for entry in sorted(locales_dir.iterdir()):
        if not entry.is_dir():
            continue
        try:
            files = _translation_files(entry)
        except OSError as ex:
            logger.warning(f"Cannot read locale directory {entry}: {ex}")
            continue
        if not files:
            logger.debug(f"Skipping {entry.name}, no translation files")
            continue
        locales.append(LocaleInfo(entry.name, files))
    return locales


def enumerate_locales(locales_dir: str | pathlib.Path, layout: FileLayout = "flat") -> list[LocaleInfo]:
    locales_dir = pathlib.Path(locales_dir)
    if not locales_dir.is_dir():
        logger.debug(f"Locales directory {locales_dir} does not exist")
        return []

    if layout == "namespaced":
        return _namespaced_locales(locales_dir)
    return _flat_locales(locales_dir)


def locale_from_path(path: str | pathlib.Path, layout: FileLayout = "flat") -> str:
    path = pathlib.Path(path)
    if layout == "namespaced":
        return path.parent.name
    return path.stem


def namespace_from_path(path: str | pathlib.Path) -> str:
    return pathlib.Path(path).stem
