# Licenced under the txec2 licence available at /LICENSE in the txec2 source.

"""
Streaming decoding of response documents.

L{parse} feeds a response body to lxml incrementally and turns the parser's
events into calls on an L{IResponseDecoder} provider.  No tree is built:
memory use depends on the depth of the document, not on its size.
"""

from lxml import etree

from twisted.logger import Logger

from txec2.exception import MalformedResponseError
from txec2.interface import IResponseDecoder
from txec2.util import local_name


__all__ = ["parse", "CHUNK_SIZE"]

CHUNK_SIZE = 2 ** 16

_log = Logger()


class _DecoderTarget(object):
    """
    lxml parser target which tracks the path of open elements and the text
    of the innermost one, and reports both to a decoder.
    """

    def __init__(self, decoder):
        self._decoder = decoder
        self._path = ()
        self._text = []

    def start(self, tag, attrib):
        name = local_name(tag)
        self._path += (name,)
        self._text = []
        self._decoder.tag_start(name, dict(attrib), self._path)

    def data(self, data):
        self._text.append(data)

    def end(self, tag):
        name = local_name(tag)
        text = u"".join(self._text)
        self._text = []
        try:
            self._decoder.tag_end(name, text, self._path)
        finally:
            self._path = self._path[:-1]

    def close(self):
        return self._decoder.result()


def _chunks(source):
    if isinstance(source, str):
        source = source.encode("utf-8")
    if isinstance(source, (bytes, bytearray, memoryview)):
        source = bytes(source)
        for offset in range(0, len(source), CHUNK_SIZE):
            yield source[offset:offset + CHUNK_SIZE]
        return
    while True:
        chunk = source.read(CHUNK_SIZE)
        if not chunk:
            return
        yield chunk


def parse(source, decoder):
    """
    Decode one XML document.

    @param source: The document, as L{bytes} or as a binary file-like object.

    @param decoder: The L{IResponseDecoder} provider to drive.  It is reset
        before the first event.

    @raise MalformedResponseError: If C{source} is not a well-formed XML
        document.  Exceptions raised by C{decoder} propagate unchanged; the
        first one aborts the parse.

    @return: The decoder's result.
    """
    decoder = IResponseDecoder(decoder)
    decoder.reset()
    target = _DecoderTarget(decoder)
    parser = etree.XMLParser(target=target)
    received = 0
    try:
        for chunk in _chunks(source):
            received += len(chunk)
            parser.feed(chunk)
        if not received:
            raise MalformedResponseError("Empty response document.")
        return parser.close()
    except etree.XMLSyntaxError as e:
        _log.debug(
            u"Malformed document after {received} bytes: {error}",
            received=received, error=e,
        )
        raise MalformedResponseError(str(e))
