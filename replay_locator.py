"""
Replay discovery for Brood War autosave archives.

The archive root holds one subdirectory per day; replay files (.rep) live at
any depth below those subdirectories.
"""

import os
from typing import Callable, List, Optional

REPLAY_EXTENSION = '.rep'

# Receives a fraction in [0.0, 1.0]; None means nobody is listening
ProgressReporter = Callable[[float], None]


class ScanError(Exception):
    """Base class for errors that abort a whole scan."""


class DirectoryNotFound(ScanError):
    def __init__(self, path: str):
        super().__init__(f"autoreplays directory not found: {path}")
        self.path = path


class EmptyArchive(ScanError):
    def __init__(self, path: str):
        super().__init__(f"no date folders found in autoreplays directory: {path}")
        self.path = path


class TraversalError(ScanError):
    def __init__(self, subdir: str, cause: OSError):
        super().__init__(f"failed to walk subdirectory {subdir}: {cause}")
        self.subdir = subdir
        self.cause = cause


def is_replay_file(filename: str) -> bool:
    """Check the replay extension, ignoring case"""
    return filename.lower().endswith(REPLAY_EXTENSION)


def _raise_walk_error(err: OSError):
    raise err


def find_replay_files(replay_dir: str, on_progress: Optional[ProgressReporter] = None) -> List[str]:
    """Collect every replay path below the date folders of replay_dir.

    Files sitting directly in replay_dir are ignored. Progress is reported once
    per date folder as (index + 1) / entry_count.

    Raises:
        DirectoryNotFound: replay_dir does not exist.
        EmptyArchive: replay_dir has no entries at all.
        TraversalError: a folder could not be listed or walked.
    """
    if not os.path.exists(replay_dir):
        raise DirectoryNotFound(replay_dir)

    try:
        entries = os.listdir(replay_dir)
    except OSError as e:
        raise TraversalError(os.path.basename(replay_dir) or replay_dir, e) from e

    if not entries:
        raise EmptyArchive(replay_dir)

    replay_files = []
    for i, name in enumerate(entries):
        subdir_path = os.path.join(replay_dir, name)
        # Symlinked folders are not followed
        if os.path.islink(subdir_path) or not os.path.isdir(subdir_path):
            continue

        try:
            # os.walk swallows listing errors unless onerror re-raises them
            for dirpath, _dirnames, filenames in os.walk(subdir_path, onerror=_raise_walk_error):
                for filename in filenames:
                    if is_replay_file(filename):
                        replay_files.append(os.path.join(dirpath, filename))
        except OSError as e:
            raise TraversalError(name, e) from e

        if on_progress is not None:
            on_progress((i + 1) / len(entries))

    return replay_files
