#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Error types raised by flaclink.

Every fatal condition is raised as a FlaclinkError subclass and handled once,
in the CLI, which logs it and exits with the error's exit code.
"""


class FlaclinkError(Exception):
    """Base class for all flaclink errors"""
    exit_code = 1


class UsageError(FlaclinkError):
    """Wrong command-line arguments"""
    exit_code = 2


class StoreUnavailable(FlaclinkError):
    """The album registry could not be opened or locked in time"""
    exit_code = 3


class ScanError(FlaclinkError):
    """A top-level scan root could not be read"""
    exit_code = 4


class ReplicationError(FlaclinkError):
    """Base class for album replication failures"""
    exit_code = 5


class DirCreateError(ReplicationError):
    """A target directory could not be created"""


class LinkError(ReplicationError):
    """A hardlink could not be created"""


class ConfigError(FlaclinkError):
    """The config file or data directory is unusable"""
    exit_code = 7


class RegistryError(FlaclinkError):
    """Base class for registry encode/decode/write failures"""
    exit_code = 6


class EncodeError(RegistryError):
    """Album contents could not be encoded into a fingerprint"""


class DecodeError(RegistryError):
    """A stored fingerprint could not be decoded"""


class WriteError(RegistryError):
    """A registry entry could not be written"""
