import logging

import httpx

from ..errors import TransportError

log = logging.getLogger(__name__)


class HTTPTransport(object):
    """
    Sends each request as a single GET to the collection endpoint. There are
    no retries: a failed request is reported and dropped.
    """

    def __init__(self, config, transport=None):
        """
        :param config:
            Tracker configuration with the endpoint and timeout.
        :param transport:
            Optional httpx transport to send through, e.g. a MockTransport.
        """
        self.config = config
        self.transport = transport

    def url(self, query_string):
        return '%s?%s' % (self.config.endpoint_url, query_string)

    def send(self, query_string, headers):
        url = self.url(query_string)
        log.debug('Sending request: %s', url)
        try:
            with httpx.Client(timeout=self.config.request_timeout,
                              transport=self.transport) as client:
                r = client.get(url, headers=headers)
        except httpx.HTTPError as e:
            raise TransportError('Request to %s failed: %s' %
                                 (self.config.endpoint_url, e)) from e
        if not r.is_success:
            raise TransportError('Request to %s failed: %d %s' %
                                 (self.config.endpoint_url, r.status_code,
                                  r.reason_phrase))
