# Processing Agents
# Specialized agents for album detection and hardlinking

from .base import BaseAgent
from .detector import Album, DetectorAgent
from .linker import LinkerAgent

__all__ = [
    'Album',
    'BaseAgent',
    'DetectorAgent',
    'LinkerAgent'
]
