"""Generally useful utilities for talking to the provider's query API.

New things in this module should be of relevance to more than one module of
the client.
"""

from urllib.parse import urlparse, urlunparse
import time


__all__ = ["iso8601time", "local_name", "parse"]


def iso8601time(time_tuple):
    """Format time_tuple as a ISO8601 time string.

    :param time_tuple: Either None, to use the current time, or a tuple tuple.
    """
    if time_tuple:
        return time.strftime("%Y-%m-%dT%H:%M:%SZ", time_tuple)
    else:
        return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())


def local_name(tag):
    """
    Strip the namespace from an element name as reported by lxml, eg
    C{"{http://ec2.amazonaws.com/doc/2009-11-30/}item"} becomes C{"item"}.
    """
    if "}" in tag:
        tag = tag.split("}", 1)[1]
    return tag


def parse(url, defaultPort=True):
    """
    Split the given URL into the scheme, host, port, and path.

    @type url: C{str}
    @param url: An URL to parse.

    @type defaultPort: C{bool}
    @param defaultPort: Whether to return the default port associated with the
        scheme in the given url, when the url doesn't specify one.

    @return: A four-tuple of the scheme, host, port, and path of the URL.  All
    of these are C{str} instances except for port, which is an C{int}.
    """
    url = url.strip()
    parsed = urlparse(url)
    scheme = parsed[0]
    path = urlunparse(("", "") + parsed[2:])
    host = parsed[1]

    if ":" in host:
        host, port = host.split(":")
        try:
            port = int(port)
        except ValueError:
            # A non-numeric port was given, it will be replaced with
            # an appropriate default value if defaultPort is True
            port = None
    else:
        port = None

    if port is None and defaultPort:
        if scheme == "https":
            port = 443
        else:
            port = 80

    if path == "":
        path = "/"
    return (scheme, host, port, path)
