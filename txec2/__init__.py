# Licenced under the txec2 licence available at /LICENSE in the txec2 source.

"""
Twisted client for EC2-style compute provisioning APIs.
"""

from txec2._version import __version__

__all__ = ["__version__"]
