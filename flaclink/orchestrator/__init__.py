# flaclink Orchestration
# Configuration, album registry and the sync pipeline

from .config import ConfigManager
from .registry import FingerprintRegistry, decode_contents, encode_contents
from .orchestrator import BackfillSummary, SyncOrchestrator, SyncSummary, create_orchestrator

__all__ = [
    'ConfigManager',
    'FingerprintRegistry',
    'encode_contents',
    'decode_contents',
    'BackfillSummary',
    'SyncSummary',
    'SyncOrchestrator',
    'create_orchestrator'
]
