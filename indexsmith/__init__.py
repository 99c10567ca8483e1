"""
Copyright (c) 2025 Eric C. Mumford (@heymumford)
This file is part of IndexSmith, licensed under the MIT License.
See LICENSE file for details.
"""

"""
IndexSmith - heuristic index advisor
Scores candidate indexes from schema metadata and decides which ones to create
"""

__version__ = "0.1.0"

from indexsmith.core.config import AutoIndexConfig
from indexsmith.heuristic_engine import HeuristicEngine, analyze_entity
from indexsmith.index_capabilities import validate_index_key

__all__ = [
    "AutoIndexConfig",
    "HeuristicEngine",
    "analyze_entity",
    "validate_index_key",
]
