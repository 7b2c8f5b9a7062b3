#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Linker Agent - Replicates an album directory into the library with hardlinks.

The album tree is rebuilt inside a hidden staging directory next to its
final location and renamed into place once every file is linked, so a
failure part way through never leaves a half-built album under the real
name. Hardlinks need source and target on the same filesystem.
"""

import os
import shutil
import tempfile
from pathlib import Path
from typing import Any, Dict

from .base import BaseAgent
from .detector import list_entries
from ..errors import DirCreateError, LinkError, ReplicationError


class LinkerAgent(BaseAgent):
    """
    Linker agent for hardlinking albums into the library.

    Directories are recreated, every other entry becomes a hardlink to the
    source file, so both paths share content and metadata.
    """

    def __init__(self, config):
        super().__init__(config)
        self.staging_prefix = config.staging_prefix
        self.links_created = 0

    @property
    def name(self) -> str:
        return "Linker"

    def process(self, item: Dict[str, Any]) -> Dict[str, Any]:
        """
        Link a single album.

        Args:
            item: Dictionary with 'path' (source album) and 'target'
                (library directory to link it into)

        Returns:
            Result with the created album path and number of links

        Raises:
            DirCreateError, LinkError: Replication failed; nothing is left
                under the album's final name.
        """
        links_before = self.links_created
        album_path = self.replicate(Path(item['path']), Path(item['target']))
        return {
            "status": "success",
            "path": str(item['path']),
            "target": str(album_path),
            "links": self.links_created - links_before
        }

    def replicate(self, source_dir: Path, target_parent: Path) -> Path:
        """
        Recreate `source_dir` as `target_parent/<name>` with hardlinked files.

        Args:
            source_dir: Album directory to replicate
            target_parent: Existing directory to create the album in

        Returns:
            Path of the new album directory

        Raises:
            DirCreateError: The album already exists in the target, or a
                directory couldn't be created.
            LinkError: Source and target are on different filesystems, or a
                file couldn't be linked.
        """
        source_dir = Path(source_dir)
        target_parent = Path(target_parent)
        album_path = target_parent / source_dir.name

        if os.path.lexists(album_path):
            raise DirCreateError(f"Target album directory already exists: {album_path}")
        self.check_same_filesystem(source_dir, target_parent)

        try:
            staging = Path(tempfile.mkdtemp(prefix=self.staging_prefix, dir=target_parent))
        except OSError as e:
            raise DirCreateError(f"Failed to create staging directory in {target_parent}: {e}") from e

        try:
            staged_album = self._link_tree(source_dir, staging)
            try:
                os.rename(staged_album, album_path)
            except OSError as e:
                raise DirCreateError(f"Failed to move {staged_album} to {album_path}: {e}") from e
        except BaseException as e:
            # Interrupts included: nothing half-built may stay in the library.
            self.log_error(f"Linking {source_dir.name} failed, removing staged copy.")
            self._remove_staging(staging, e)
            raise

        try:
            staging.rmdir()
        except OSError as e:
            self.log_error(f"Failed to remove empty staging directory {staging}: {e}")
        self.log(f"Linked {source_dir} -> {album_path}")
        return album_path

    def check_same_filesystem(self, source_dir: Path, target_parent: Path) -> None:
        """
        Raises:
            LinkError: Either path can't be stat'ed, or they live on
                different filesystems.
        """
        try:
            source_dev = os.stat(source_dir).st_dev
            target_dev = os.stat(target_parent).st_dev
        except OSError as e:
            raise LinkError(f"Failed to stat {source_dir} or {target_parent}: {e}") from e

        if source_dev != target_dev:
            raise LinkError(
                f"Cannot create hardlinks across different filesystems: "
                f"{source_dir} (dev {source_dev}) -> {target_parent} (dev {target_dev})"
            )

    def _link_tree(self, source_dir: Path, target_parent: Path) -> Path:
        target_dir = target_parent / source_dir.name
        try:
            os.mkdir(target_dir, 0o775)
        except OSError as e:
            raise DirCreateError(f"Failed to create directory {target_dir}: {e}") from e

        try:
            entries = list_entries(source_dir)
        except OSError as e:
            raise LinkError(f"Failed to read directory {source_dir}: {e}") from e

        for entry in entries:
            if entry.is_dir(follow_symlinks=False):
                self._link_tree(Path(entry.path), target_dir)
                continue

            link_path = target_dir / entry.name
            try:
                os.link(entry.path, link_path, follow_symlinks=False)
            except OSError as e:
                raise LinkError(f"Failed to link {entry.path} -> {link_path}: {e}") from e
            self.links_created += 1
            self.log_debug(f"Linked {entry.path} -> {link_path}")

        return target_dir

    def _remove_staging(self, staging: Path, cause: BaseException) -> None:
        try:
            shutil.rmtree(staging)
        except OSError as e:
            # Keep the original failure; just say what was left behind.
            self.log_error(f"Failed to remove staging directory {staging}: {e}")
            if isinstance(cause, ReplicationError):
                cause.args = (f"{cause} (partial copy left at {staging})",)
