# Licenced under the txec2 licence available at /LICENSE in the txec2 source.

"""
Interface definitions for response decoding and request signing.
"""

from zope.interface import Interface


class IResponseDecoder(Interface):
    """
    An L{IResponseDecoder} provider turns the element events of one response
    document into a result value.

    The events are delivered by L{txec2.parser.parse}, which owns the path of
    open elements and hands it to every callback.  A decoder instance is used
    for a single document.
    """
    def reset():
        """
        Discard any state; called once before the first event.
        """

    def tag_start(name, attributes, path):
        """
        An element was opened.

        @param name: The element name, without namespace.
        @type name: L{str}

        @param attributes: The element's attributes.
        @type attributes: L{dict}

        @param path: The names of all open elements, from the document root
            to this element inclusive.
        @type path: L{tuple} of L{str}
        """

    def tag_end(name, text, path):
        """
        An element was closed.

        @param text: The character data of this element which was not
            interrupted by a child element.
        @type text: L{str}

        @param path: As for C{tag_start}, still including this element.

        @raise txec2.exception.MalformedResponseError: If the element closes
            in a position the decoder's state does not allow.
        """

    def result():
        """
        @return: The value decoded from the document.
        """


class ISigner(Interface):
    """
    Adds authentication to the parameters of a query before it is sent.
    """
    def sign(endpoint, params):
        """
        @param endpoint: The L{txec2.service.EC2ServiceEndpoint} the query
            will be sent to.

        @param params: The query parameters, a C{dict} of C{str} to C{str}.

        @return: The parameters to send.
        @rtype: C{dict}
        """
