# Copyright (c) 2009 Canonical Ltd <duncan.mcgreggor@canonical.com>
# Licenced under the txec2 licence available at /LICENSE in the txec2 source.

from twisted.web.error import Error


__all__ = ["EC2Error", "MalformedResponseError", "TRANSIENT_ERROR_CODES"]


# Provider error codes which describe a temporary condition; a request which
# failed with one of these may succeed if it is issued again.
TRANSIENT_ERROR_CODES = frozenset([
    "InternalError",
    "Unavailable",
    "ServiceUnavailable",
    "RequestLimitExceeded",
    "Throttling",
])

TRANSIENT_STATUSES = frozenset([500, 503])


class MalformedResponseError(Exception):
    """
    The provider sent a response body that could not be decoded: it was not
    well-formed XML, or its elements arrived in an order the decoder for the
    response does not allow.
    """


class EC2Error(Error):
    """
    The provider rejected a request.

    @ivar errors: A C{list} of C{dict}s, one per error reported in the
        response, each with C{"Code"} and C{"Message"} keys.
    @ivar request_id: The request id reported with the error, or C{""}.
    @ivar host_id: The host id reported with the error, or C{""}.
    """
    def __init__(self, status, errors=None, request_id="", host_id="",
                 response=None):
        super(EC2Error, self).__init__(status, None, response)
        self.errors = list(errors or [])
        self.request_id = request_id or ""
        self.host_id = host_id or ""

    def __str__(self):
        return self._get_error_message_string()

    def __repr__(self):
        return "<%s object with %s>" % (
            self.__class__.__name__, self._get_error_code_string())

    @property
    def http_status(self):
        return int(self.status)

    def _get_error_code_string(self):
        error_code = self.get_error_codes()
        if len(self.errors) > 1:
            return "Error count: %s" % error_code
        return "Error code: %s" % error_code

    def _get_error_message_string(self):
        error_message = self.get_error_messages()
        if len(self.errors) > 1:
            return "%s." % error_message
        return "Error Message: %s" % error_message

    def has_error(self, code):
        for error in self.errors:
            if code in error.values():
                return True
        return False

    def get_error_codes(self):
        count = len(self.errors)
        if count > 1:
            return count
        elif count == 0:
            return None
        return self.errors[0].get("Code")

    def get_error_messages(self):
        count = len(self.errors)
        if count > 1:
            return "Multiple EC2 Errors"
        elif count == 0:
            return "Empty error list"
        return self.errors[0].get("Message")

    def is_transient(self):
        """
        Return C{True} if issuing the same request again may succeed.
        """
        if self.http_status in TRANSIENT_STATUSES:
            return True
        for error in self.errors:
            if error.get("Code") in TRANSIENT_ERROR_CODES:
                return True
        return False
