#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Detector Agent - Decides which directories are albums.

Responsibilities:
- Search a directory tree for audio files (FLAC by default)
- Describe an album by its immediate content listing, which is what the
  registry fingerprints
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

from .base import BaseAgent
from ..errors import ScanError


@dataclass
class Album:
    """An album directory and its immediate entries, in listing order"""
    name: str
    contents: List[str] = field(default_factory=list)

    @property
    def entry_count(self) -> int:
        return len(self.contents)


def list_entries(dir_path: Path) -> List[os.DirEntry]:
    """
    Immediate entries of `dir_path`, sorted by name.

    Raises:
        OSError: The directory can't be read.
    """
    with os.scandir(dir_path) as it:
        return sorted(it, key=lambda entry: entry.name)


def list_scan_root(root: Path) -> List[os.DirEntry]:
    """
    Entries of a top-level scan root. Unlike nested directories, a root
    that can't be read stops the run.

    Raises:
        ScanError: The root can't be read.
    """
    try:
        return list_entries(root)
    except OSError as e:
        raise ScanError(f"Failed to read directory {root}: {e}") from e


class DetectorAgent(BaseAgent):
    """
    Detector agent for finding albums.

    A directory is an album when it contains an audio file, either directly
    or in any of its subdirectories.
    """

    def __init__(self, config):
        super().__init__(config)
        self.audio_extensions = set(config.audio_extensions)

    @property
    def name(self) -> str:
        return "Detector"

    def process(self, item: Dict[str, Any]) -> Dict[str, Any]:
        """
        Detect and describe a single candidate directory.

        Args:
            item: Dictionary with 'path' key pointing to the directory

        Returns:
            {'status': 'album', 'album': Album} or {'status': 'skipped'}
        """
        path = Path(item['path'])
        if not self.is_album(path):
            self.log_debug(f"Not an album: {path.name}")
            return {"status": "skipped", "path": str(path)}

        album = self.describe(path)
        self.log_debug(f"Found album: {album.name} ({album.entry_count} entries)")
        return {"status": "album", "path": str(path), "album": album}

    def is_audio_file(self, filename: str) -> bool:
        return os.path.splitext(filename)[1].lower() in self.audio_extensions

    def is_album(self, dir_path: Path) -> bool:
        """
        Depth-first search for an audio file in `dir_path` and below.

        Entries are visited in name order and the search stops at the first
        audio file. Directories that can't be read count as "no audio".
        """
        try:
            entries = list_entries(dir_path)
        except OSError as e:
            self.log_error(f"Failed to read directory {dir_path}: {e}")
            return False

        for entry in entries:
            if entry.is_dir(follow_symlinks=False):
                if self.is_album(Path(entry.path)):
                    return True
            elif self.is_audio_file(entry.name):
                return True
        return False

    def describe(self, dir_path: Path) -> Album:
        """
        Build the Album for `dir_path` from its immediate entries.

        Raises:
            ScanError: The directory can't be read.
        """
        try:
            entries = list_entries(dir_path)
        except OSError as e:
            raise ScanError(f"Failed to read album directory {dir_path}: {e}") from e

        return Album(
            name=Path(dir_path).name,
            contents=[entry.name for entry in entries]
        )
