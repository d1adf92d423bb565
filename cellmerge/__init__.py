"""
Cellmerge - Location-grid merge game engine

The map is quantized into cells, each deterministically seeded with a
token. The player walks the grid and merges equal tokens, 2048-style.
The engine provides:
- Coordinate quantization
- Deterministic token generation
- Sparse overlay of player changes
- Pick-up/merge state machine with win detection
- Pluggable movement (discrete steps or a location feed)
"""

__version__ = "0.1.0"
