# Copyright (C) 2009 Robert Collins <robertc@robertcollins.net>
# Copyright (C) 2009 Canonical Ltd
# Licenced under the txec2 licence available at /LICENSE in the txec2 source.

"""
Submission of queries to the service.

A L{Query} turns an action and its parameters into an HTTP request, and
gives back the raw response body.  Error documents are turned into
L{EC2Error}s, and errors the provider reports as temporary are retried
before the caller ever sees them.
"""

from io import BytesIO
from urllib.parse import quote

from twisted.internet import task
from twisted.logger import Logger
from twisted.web.client import Agent, FileBodyProducer, readBody
from twisted.web.error import Error as TwistedWebError
from twisted.web.http import OK
from twisted.web.http_headers import Headers

from txec2.decoders import error_decoder
from txec2.exception import (
    EC2Error, MalformedResponseError, TRANSIENT_STATUSES)
from txec2.interface import ISigner
from txec2.parser import parse
from txec2.util import iso8601time


__all__ = ["Query", "error_from_response"]


def error_from_response(status, body):
    """
    Build the exception describing a failed query.

    @param status: The HTTP status of the response.
    @param body: The response body.

    @return: An L{EC2Error} if C{body} is a provider error document,
        otherwise a L{twisted.web.error.Error} for C{status}.
    """
    try:
        details = parse(body, error_decoder())
    except MalformedResponseError:
        return TwistedWebError(status, response=body)
    if not details["errors"]:
        return TwistedWebError(status, response=body)
    return EC2Error(
        status, details["errors"], details["request_id"],
        details["host_id"], response=body)


def _is_transient(error):
    if isinstance(error, EC2Error):
        return error.is_transient()
    return int(error.status) in TRANSIENT_STATUSES


def _encode(value):
    return quote(value, safe="~")


class Query(object):
    """
    A query that may be submitted to the service.

    @param action: The API action, eg C{"DescribeKeyPairs"}.
    @param endpoint: The L{EC2ServiceEndpoint} to submit to.
    @param other_params: Parameters of the action, a C{dict} of C{str}.
    @param signer: An optional L{ISigner} provider which authenticates the
        query parameters.
    @param agent: The L{twisted.web.iweb.IAgent} provider issuing requests.
    @param reactor: The reactor used for the default agent and to schedule
        retries.
    @param retries: How many times a transient failure is retried.
    @param backoff: The delay before the first retry, in seconds; it doubles
        with every further retry.
    """
    _log = Logger()

    def __init__(self, action=None, endpoint=None, other_params=None,
                 signer=None, agent=None, reactor=None, retries=3,
                 backoff=0.5, time_tuple=None):
        if not action:
            raise TypeError("The query requires an action parameter.")
        if reactor is None:
            from twisted.internet import reactor
        if agent is None:
            agent = Agent(reactor)
        self.action = action
        self.endpoint = endpoint
        self.signer = signer
        self.agent = agent
        self.reactor = reactor
        self.retries = retries
        self.backoff = backoff
        self.params = {
            "Action": action,
            "Version": endpoint.api_version,
            "Timestamp": iso8601time(time_tuple),
        }
        if other_params:
            self.params.update(other_params)

    def get_params(self):
        """
        Return the parameters to send, signed if there is a signer.
        """
        params = dict(self.params)
        if self.signer is not None:
            params = ISigner(self.signer).sign(self.endpoint, params)
        return params

    def get_query_string(self):
        return "&".join(
            "%s=%s" % (_encode(key), _encode(value))
            for key, value in sorted(self.get_params().items()))

    def submit(self):
        """Submit this query.

        @return: A L{Deferred} firing with the response body, or failing
            with an L{EC2Error}, a L{twisted.web.error.Error} or the
            transport's failure.
        """
        return self._attempt(self.get_query_string(), 1)

    def _attempt(self, query_string, attempt):
        url = self.endpoint.get_uri()
        method = self.endpoint.method
        headers = Headers()
        body_producer = None
        if method == "POST":
            headers.setRawHeaders(
                b"content-type", [b"application/x-www-form-urlencoded"])
            body_producer = FileBodyProducer(
                BytesIO(query_string.encode("utf-8")))
        else:
            url += "?" + query_string
        self._log.info(
            u"Submitting {action} (attempt {attempt}): {method} {url}",
            action=self.action, attempt=attempt, method=method,
            url=self.endpoint.get_uri(),
        )
        d = self.agent.request(
            method.encode("ascii"), url.encode("utf-8"), headers,
            body_producer)
        d.addCallback(self._handle_response)
        d.addErrback(self._retry_transient, query_string, attempt)
        return d

    def _handle_response(self, response):
        d = readBody(response)
        d.addCallback(self._check_response, response.code)
        return d

    def _check_response(self, body, status):
        if status != OK:
            raise error_from_response(status, body)
        return body

    def _retry_transient(self, failure, query_string, attempt):
        failure.trap(TwistedWebError)
        if attempt > self.retries or not _is_transient(failure.value):
            return failure
        delay = self.backoff * 2 ** (attempt - 1)
        self._log.warn(
            u"{action} failed with {error!r}; retrying in {delay} seconds",
            action=self.action, error=failure.value, delay=delay,
        )
        return task.deferLater(
            self.reactor, delay, self._attempt, query_string, attempt + 1)
