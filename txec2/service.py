# Copyright (C) 2009 Duncan McGreggor <duncan@canonical.com>
# Copyright (C) 2009 Robert Collins <robertc@robertcollins.net>
# Licenced under the txec2 licence available at /LICENSE in the txec2 source.

import os

from txec2.util import parse


__all__ = ["EC2ServiceEndpoint", "DEFAULT_URI", "DEFAULT_API_VERSION"]


ENV_URL = "EC2_URL"
ENV_API_VERSION = "EC2_API_VERSION"

DEFAULT_URI = "https://ec2.amazonaws.com/"
DEFAULT_API_VERSION = "2009-11-30"


class EC2ServiceEndpoint(object):
    """
    Where and how queries are sent.

    @param uri: The URL for the service.  If empty, the environment variable
        C{EC2_URL} is consulted, then L{DEFAULT_URI} is used.
    @param method: The HTTP method used when accessing the service, C{"GET"}
        or C{"POST"}.
    @param api_version: The API version requested in every query.  If
        empty, the environment variable C{EC2_API_VERSION} is consulted, then
        L{DEFAULT_API_VERSION} is used.
    @param environ: The environment. If unspecified, L{os.environ} is used.
    """

    def __init__(self, uri="", method="GET", api_version="",
                 environ=os.environ):
        if not uri:
            uri = environ.get(ENV_URL) or DEFAULT_URI
        if not api_version:
            api_version = environ.get(ENV_API_VERSION) or DEFAULT_API_VERSION
        if method not in ("GET", "POST"):
            raise ValueError("Unsupported HTTP method: %r" % (method,))
        self.method = method
        self.api_version = api_version
        self.scheme, self.host, self.port, self.path = parse(
            uri, defaultPort=False)
        if not self.scheme:
            self.scheme = "http"

    def get_canonical_host(self):
        """
        Return the canonical host as for the Host HTTP header specification.
        """
        host = self.host.lower()
        if self.port is not None:
            host = "%s:%s" % (host, self.port)
        return host

    def get_uri(self):
        """Get a URL representation of the service."""
        return "%s://%s%s" % (
            self.scheme, self.get_canonical_host(), self.path)
