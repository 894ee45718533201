# Licenced under the txec2 licence available at /LICENSE in the txec2 source.

"""
Provides txec2 version information.
"""

from incremental import Version

__version__ = Version("txec2", 0, 1, 0)
__all__ = ["__version__"]
