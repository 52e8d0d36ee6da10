from localegen.compiler import Compiler, compile_project, load_translations
from localegen.config import Config, load_config
from localegen.discovery import discover_projects, find_project, get_default_project
from localegen.watcher import TranslationWatcher, start_watch

__all__ = [
    "Compiler",
    "Config",
    "TranslationWatcher",
    "compile_project",
    "discover_projects",
    "find_project",
    "get_default_project",
    "load_config",
    "load_translations",
    "start_watch",
]
