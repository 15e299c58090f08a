"""Release mirror.

Discovers the newest upstream build of an artifact on a plain directory listing,
verifies and decompresses it, and republishes it as one release per version.
"""

from __future__ import annotations

__all__ = ["__version__"]
__version__ = "0.1.0"
