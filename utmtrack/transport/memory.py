import logging

from collections import deque

from ..errors import TransportError

log = logging.getLogger(__name__)


class MemoryTransport(object):
    """
    An in-memory transport, intended for testing only. Sent requests are kept
    as ``(query_string, headers)`` tuples instead of going over the network.
    """
    def __init__(self, fail=False):
        self.q = deque()
        self.fail = fail

    def send(self, query_string, headers):
        if self.fail:
            log.info('Refusing request: %r', query_string)
            raise TransportError('Memory transport is set to fail.')
        log.info('Recording request: %r', query_string)
        self.q.append((query_string, dict(headers)))

    def process(self):
        log.info('Swapping out sent requests.')
        to_process = self.q
        self.q = deque()
        for query_string, headers in to_process:
            yield query_string, headers

    def purge(self):
        log.info('Purging sent requests.')
        self.q = deque()
