"""
File monitoring module for Butterflow.

This module watches workflow and task files and notifies the application
when they change so the diagram can be rebuilt.
"""

import time
import threading
from pathlib import Path
from typing import Callable, Dict, Optional, Set
from watchdog.observers import Observer
from watchdog.events import FileSystemEventHandler
import logging

from .event_bus import EventBus, FileEvent


FILE_CHANGED = "file_changed"


class WorkflowFileHandler(FileSystemEventHandler):
    """
    Event handler for workflow file changes.
    """

    def __init__(self, callback: Callable[[str, str], None]):
        """
        Initialize the file handler.

        Args:
            callback: Function to call with (event_type, file_path) when files change
        """
        super().__init__()
        self.callback = callback
        self.logger = logging.getLogger(__name__)

    def on_modified(self, event):
        """Handle file modification events."""
        if not event.is_directory:
            self._handle_event('modified', str(event.src_path))

    def on_created(self, event):
        """Handle file creation events."""
        if not event.is_directory:
            self._handle_event('created', str(event.src_path))

    def on_moved(self, event):
        """Handle file move events; editors often save by renaming over the target."""
        if not event.is_directory:
            dest_path = getattr(event, 'dest_path', event.src_path)
            self._handle_event('moved', str(dest_path))

    def _handle_event(self, event_type: str, file_path: str):
        """
        Handle a file system event.

        Args:
            event_type: Type of event (modified, created, moved)
            file_path: Path to the file that changed
        """
        try:
            self.callback(event_type, file_path)
        except Exception as e:
            self.logger.error(f"Error in file event callback: {str(e)}")


class FileMonitor:
    """
    Watches a fixed set of files and reports debounced changes.
    """

    def __init__(self, config, on_change: Callable[[Path], None], event_bus: Optional[EventBus] = None):
        """
        Initialize the file monitor.

        Args:
            config: Application configuration
            on_change: Called with the changed path, from the observer thread
            event_bus: Optional event bus for FileEvent notifications
        """
        self.config = config
        self.on_change = on_change
        self.event_bus = event_bus
        self.logger = logging.getLogger(__name__)

        self.observer = Observer()
        self.watched_files: Set[Path] = set()
        self.watched_dirs: Set[Path] = set()
        self.event_handler = WorkflowFileHandler(self._on_file_change)
        self.running = False

        self._last_seen: Dict[Path, float] = {}
        self._lock = threading.Lock()

    def watch(self, path: Path) -> None:
        """
        Add a file to the watch list.

        Args:
            path: File to watch
        """
        path = Path(path).resolve()
        self.watched_files.add(path)
        directory = path.parent
        if directory not in self.watched_dirs:
            self.watched_dirs.add(directory)
            if self.running:
                self.observer.schedule(self.event_handler, str(directory), recursive=False)
        self.logger.debug(f"Watching {path}")

    def is_watching(self, path: Path) -> bool:
        return Path(path).resolve() in self.watched_files

    def start(self) -> None:
        """Start the observer thread."""
        if self.running:
            return
        if not self.config.monitor.enabled:
            self.logger.info("File monitoring disabled by configuration")
            return
        for directory in self.watched_dirs:
            self.observer.schedule(self.event_handler, str(directory), recursive=False)
        self.observer.start()
        self.running = True
        self.logger.info(f"Monitoring {len(self.watched_files)} files")

    def stop(self) -> None:
        """Stop the observer thread."""
        if not self.running:
            return
        self.observer.stop()
        self.observer.join()
        self.running = False
        self.logger.info("File monitoring stopped")

    def _on_file_change(self, event_type: str, file_path: str):
        """
        Handle a raw file system event, ignoring unwatched files and repeats.

        Args:
            event_type: Type of file system event
            file_path: Path to the changed file
        """
        path = Path(file_path).resolve()
        if path not in self.watched_files:
            return

        now = time.monotonic()
        with self._lock:
            last = self._last_seen.get(path)
            if last is not None and now - last < self.config.monitor.debounce:
                return
            self._last_seen[path] = now

        self.logger.info(f"File {event_type}: {path}")
        if self.event_bus is not None:
            self.event_bus.publish(FileEvent(type=FILE_CHANGED, data={'path': str(path), 'event_type': event_type},
                                             source="file_monitor"))
        self.on_change(path)
