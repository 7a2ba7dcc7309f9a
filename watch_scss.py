from watchdog.observers import Observer
from watchdog.events import FileSystemEventHandler, EVENT_TYPE_CREATED, EVENT_TYPE_MODIFIED, EVENT_TYPE_MOVED
import logging
import os
import queue
import sys
from pathlib import Path

from compile_scss import SASS_DIR, CSS_DIR, SOURCE_SUFFIX, compile_changed, is_partial

WATCHED_EVENT_TYPES = (EVENT_TYPE_CREATED, EVENT_TYPE_MODIFIED, EVENT_TYPE_MOVED)


class SCSSHandler(FileSystemEventHandler):
    """Hands every raw event to the main thread; filtering happens there."""

    def __init__(self, events):
        super().__init__()
        self.events = events

    def on_any_event(self, event):
        self.events.put(event)


def ensure_output_dir(css_dir=CSS_DIR):
    try:
        os.makedirs(css_dir, exist_ok=True)
    except OSError as e:
        sys.exit(f"Failed to create output directory {css_dir}: {e}")


def start_observer(events, sass_dir=SASS_DIR):
    if not os.path.isdir(sass_dir):
        sys.exit(f"Input directory {sass_dir} does not exist")
    observer = Observer()
    try:
        observer.schedule(SCSSHandler(events), path=sass_dir, recursive=True)
        observer.start()
    except OSError as e:
        sys.exit(f"Failed to watch {sass_dir}: {e}")
    return observer


def handle_event(event, sass_dir=SASS_DIR, css_dir=CSS_DIR):
    """Returns True if a compilation was attempted."""
    if event.event_type not in WATCHED_EVENT_TYPES or event.is_directory:
        return False
    # editors that save via temp file + rename only report the move
    if event.event_type == EVENT_TYPE_MOVED:
        path = os.fsdecode(event.dest_path)
    else:
        path = os.fsdecode(event.src_path)
    if not path or Path(path).suffix != SOURCE_SUFFIX:
        return False
    if is_partial(path):
        logging.info("Skipping partial file: %s", path)
        return False
    compile_changed(path, sass_dir, css_dir)
    return True


def consume(events, sass_dir=SASS_DIR, css_dir=CSS_DIR):
    """
    Process events one at a time. A None on the queue ends the loop; main never
    sends one and runs until Ctrl+C.
    """
    while True:
        event = events.get()
        if event is None:
            return
        handle_event(event, sass_dir, css_dir)


def main():
    logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s %(message)s')
    ensure_output_dir(CSS_DIR)
    events = queue.Queue()
    observer = start_observer(events, SASS_DIR)
    print(f"Watching for changes in: {SASS_DIR}")
    try:
        consume(events, SASS_DIR, CSS_DIR)
    except KeyboardInterrupt:
        print("\nWatcher stopped.")
    finally:
        observer.stop()
        observer.join()


if __name__ == "__main__":
    main()
