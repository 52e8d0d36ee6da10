"""Recompilation driven by filesystem events.

One :class:`TranslationWatcher` owns all watch state for one project. Passes
are single-flight: an event arriving while a pass runs only marks a pending
recompile, so any number of events during one pass cause exactly one more
pass once it finishes.
"""

import enum
import logging
import pathlib
import threading
from collections.abc import Callable

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from localegen.classes import CompileResult, DiscoveredProject
from localegen.compiler import Compiler
from localegen.config import Config
from localegen.locales import TRANSLATION_SUFFIX

logger = logging.getLogger(__name__)

CompileCallback = Callable[[list[CompileResult]], None]
ErrorCallback = Callable[[Exception], None]

EVENT_KINDS = {
    "created": "added",
    "modified": "changed",
    "deleted": "removed",
    "moved": "moved",
}


class WatchState(enum.Enum):
    IDLE = "idle"
    COMPILING = "compiling"
    PENDING_RECOMPILE = "pending_recompile"


class _EventHandler(FileSystemEventHandler):
    def __init__(self, watcher: "TranslationWatcher"):
        super().__init__()
        self.watcher = watcher

    def on_any_event(self, event: FileSystemEvent) -> None:
        kind = EVENT_KINDS.get(event.event_type)
        if kind is None or event.is_directory:
            return
        paths = [event.src_path, getattr(event, "dest_path", "")]
        for path in paths:
            if path and self.watcher.is_translation_file(path):
                self.watcher.notify(path, kind)
                return


class TranslationWatcher:
    def __init__(
        self,
        config: Config,
        project_root: str | pathlib.Path,
        on_compile: CompileCallback | None = None,
        on_error: ErrorCallback | None = None,
        compiler: Compiler | None = None,
    ):
        self.config = config
        self.project_root = pathlib.Path(project_root)
        self.on_compile = on_compile
        self.on_error = on_error
        self.compiler = compiler or Compiler(config, self.project_root)
        self.passes = 0

        self._state = WatchState.IDLE
        self._condition = threading.Condition()
        self._observer: Observer | None = None
        self._watching = False

    @property
    def state(self) -> WatchState:
        with self._condition:
            return self._state

    @property
    def locales_dir(self) -> pathlib.Path:
        return (self.project_root / self.config.locales_dir).resolve()

    @property
    def watching(self) -> bool:
        return self._watching

    def is_translation_file(self, path: str | pathlib.Path) -> bool:
        path = pathlib.Path(path).resolve()
        return path.suffix == TRANSLATION_SUFFIX and self.locales_dir in path.parents

    def start(self) -> None:
        if self._watching:
            return

        self._run_pass()

        locales_dir = self.locales_dir
        # Until the locales directory exists, watch the project root for its creation.
        watch_path = locales_dir if locales_dir.is_dir() else self.project_root.resolve()
        recursive = watch_path != locales_dir or self.config.layout == "namespaced"

        self._observer = Observer()
        self._observer.schedule(_EventHandler(self), str(watch_path), recursive=recursive)
        self._observer.start()
        self._watching = True
        logger.info(f"Watching for changes in {locales_dir}")

    def stop(self) -> None:
        with self._condition:
            self._watching = False
            if self._state == WatchState.PENDING_RECOMPILE:
                self._state = WatchState.COMPILING
        if self._observer is not None:
            self._observer.stop()
            self._observer.join()
            self._observer = None
        logger.info("Stopped watching")

    def notify(self, path: str | pathlib.Path, kind: str = "changed") -> None:
        """Record a change to ``path``; starts a pass or marks one pending."""
        with self._condition:
            if not self._watching:
                return
            logger.info(f"File {kind}: {pathlib.Path(path).name}")
            if self._state == WatchState.IDLE:
                self._state = WatchState.COMPILING
                threading.Thread(target=self._worker, name="localegen-compile", daemon=True).start()
            else:
                self._state = WatchState.PENDING_RECOMPILE

    def wait_idle(self, timeout: float | None = None) -> bool:
        with self._condition:
            return self._condition.wait_for(lambda: self._state == WatchState.IDLE, timeout)

    def _worker(self) -> None:
        while True:
            try:
                self._run_pass()
            except Exception as ex:
                logger.error(f"Error callback failed: {ex}")
            with self._condition:
                if self._state == WatchState.PENDING_RECOMPILE and self._watching:
                    self._state = WatchState.COMPILING
                    continue
                self._state = WatchState.IDLE
                self._condition.notify_all()
                return

    def _run_pass(self) -> None:
        self.passes += 1
        try:
            results = self.compiler.compile()
            if self.on_compile is not None:
                self.on_compile(results)
        except Exception as ex:
            logger.error(f"Compilation failed: {ex}")
            if self.on_error is not None:
                self.on_error(ex)


def start_watch(
    project: DiscoveredProject,
    on_compile: CompileCallback | None = None,
    on_error: ErrorCallback | None = None,
) -> TranslationWatcher:
    watcher = TranslationWatcher(project.config, project.path, on_compile, on_error)
    watcher.start()
    return watcher
