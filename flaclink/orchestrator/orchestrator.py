#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Sync Orchestrator - Main orchestration class.

Runs one flaclink pass:
    Backfill (library) -> Sync new albums (downloads -> library)

Usage:
    from flaclink.orchestrator import create_orchestrator

    orch = create_orchestrator()
    summary = orch.run('/downloads', '/music')
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from .config import ConfigManager
from .registry import FingerprintRegistry

from ..agents import DetectorAgent, LinkerAgent
from ..agents.detector import list_scan_root

logger = logging.getLogger(__name__)


@dataclass
class BackfillSummary:
    """Counts from registering albums already in the library"""
    skipped_files: int = 0
    registered: int = 0
    known: int = 0


@dataclass
class SyncSummary:
    """Counts from linking new albums into the library"""
    skipped_files: int = 0
    linked: int = 0
    duplicates: int = 0


class SyncOrchestrator:
    """
    Central orchestrator for flaclink.

    Coordinates the detector and linker agents against the album registry.
    Each top-level operation opens the registry once and closes it on the
    way out, whether it finishes or fails.
    """

    def __init__(self, config: ConfigManager):
        """
        Initialize orchestrator.

        Args:
            config: ConfigManager with registry location and lock timeout
        """
        self.config = config
        self.detector = DetectorAgent(config)
        self.linker = LinkerAgent(config)

    def open_registry(self) -> FingerprintRegistry:
        """A new, unopened registry for use in a `with` block"""
        return FingerprintRegistry(self.config.registry_path, self.config.lock_timeout)

    # ==================== Operations ====================

    def run(self, source_root: Path, target_root: Path) -> SyncSummary:
        """
        Register albums already in `target_root`, then link new albums from
        `source_root` into it.
        """
        self.backfill(target_root)
        return self.sync_new(source_root, target_root)

    def backfill(self, library_root: Path) -> BackfillSummary:
        """
        Register every album already present in the library, without linking.

        Albums added to the library by hand are then recognized as
        duplicates when they show up in the downloads folder.
        """
        library_root = Path(library_root)
        logger.info("Updating local DB with flac albums already in target dir %s.", library_root)
        entries = list_scan_root(library_root)
        summary = BackfillSummary()

        with self.open_registry() as registry:
            for entry in entries:
                if not entry.is_dir(follow_symlinks=False):
                    logger.info("Skipping regular file: %s", entry.name)
                    summary.skipped_files += 1
                    continue
                if entry.name.startswith(self.config.staging_prefix):
                    logger.warning("Ignoring leftover staging directory: %s", entry.name)
                    continue

                result = self.detector.process({'path': entry.path})
                if result['status'] != 'album':
                    continue

                album = result['album']
                if registry.contains(album):
                    summary.known += 1
                    continue

                logger.info("Adding existing album to DB: %s.", album.name)
                registry.insert(album)
                summary.registered += 1

        logger.info("Registered %d existing albums, %d already in DB.", summary.registered, summary.known)
        return summary

    def sync_new(self, source_root: Path, target_root: Path) -> SyncSummary:
        """
        Link every album in `source_root` that the registry doesn't know yet.

        An album is registered only after it has been linked completely.
        A replication failure is raised immediately, leaving earlier albums
        linked and registered.
        """
        source_root = Path(source_root)
        target_root = Path(target_root)
        logger.info("Scanning for albums in %s.", source_root)
        entries = list_scan_root(source_root)
        summary = SyncSummary()
        self.linker.start_timer()

        with self.open_registry() as registry:
            for entry in entries:
                if not entry.is_dir(follow_symlinks=False):
                    summary.skipped_files += 1
                    continue

                result = self.detector.process({'path': entry.path})
                if result['status'] != 'album':
                    continue

                album = result['album']
                if registry.contains(album):
                    summary.duplicates += 1
                    continue

                logger.info("Linking album: %s.", entry.name)
                self.linker.process({'path': entry.path, 'target': target_root})
                registry.insert(album)
                summary.linked += 1

        logger.info("Skipped %d regular files.", summary.skipped_files)
        logger.info("Linked %d new albums, found %d already in DB or duplicate (%.1fs).",
                    summary.linked, summary.duplicates, self.linker.elapsed)
        return summary

    def list_albums(self, callback: Callable[[str, list], None]) -> int:
        """
        Call callback(name, contents) for every registered album.

        Returns:
            Number of albums listed
        """
        with self.open_registry() as registry:
            registry.for_each(callback)
            return len(registry)


# Convenience function
def create_orchestrator(data_dir: Optional[Path] = None) -> SyncOrchestrator:
    """Create the data directory if needed and return an orchestrator"""
    config = ConfigManager(data_dir)
    config.setup_data_dir()
    return SyncOrchestrator(config)
