from .util import (generate_hash, generate_32bit_random, first_language,
                   from_timestamp, to_timestamp, now)


class Visitor(object):
    """
    A visitor of the tracked site, i.e. what the ``__utma`` cookie identifies
    in a browser.
    """

    def __init__(self, unique_id=None, ip_address=None, user_agent=None,
                 locale=None, screen_resolution=None, screen_color_depth=None,
                 flash_version=None, java_enabled=None,
                 first_visit_time=None, previous_visit_time=None,
                 current_visit_time=None, visit_count=1):
        """
        Initialize the Visitor. All visit times default to now.

        :param unique_id:
            31-bit visitor id. Generated on first access if not given.
        :type unique_id:
            int
        :param locale:
            Locale such as ``en_US`` or ``de-DE``, sent as ``utmul``.
        :param screen_resolution:
            Resolution such as ``1024x768``, sent as ``utmsr``.
        :param visit_count:
            Number of visits (sessions) of this visitor, including the
            current one.
        """
        t = now()
        self.unique_id = unique_id
        self.ip_address = ip_address
        self.user_agent = user_agent
        self.locale = locale
        self.screen_resolution = screen_resolution
        self.screen_color_depth = screen_color_depth
        self.flash_version = flash_version
        self.java_enabled = java_enabled
        self.first_visit_time = first_visit_time or t
        self.previous_visit_time = previous_visit_time or t
        self.current_visit_time = current_visit_time or t
        self.visit_count = visit_count

    @property
    def unique_id(self):
        if self._unique_id is None:
            self._unique_id = self.generate_unique_id()
        return self._unique_id

    @unique_id.setter
    def unique_id(self, value):
        if value is not None and (not isinstance(value, int) or
                                  isinstance(value, bool) or
                                  not 0 <= value <= 0x7fffffff):
            raise ValueError('Visitor unique ID has to be a 32-bit integer '
                             'between 0 and 2147483647.')
        self._unique_id = value

    def generate_unique_id(self):
        """
        Build a visitor id from a random number mixed with a fingerprint of
        the browser properties, the same way the browser script does.
        """
        fingerprint = ''.join(str(v) for v in (self.user_agent,
                                               self.screen_resolution,
                                               self.screen_color_depth)
                              if v is not None)
        return (generate_32bit_random() ^ generate_hash(fingerprint)) & \
            0x7fffffff

    def add_session(self, session):
        """
        Record the start of a new session: the current visit becomes the
        previous one and the visit count goes up.
        """
        start_time = session.start_time
        if start_time != self.current_visit_time:
            self.previous_visit_time = self.current_visit_time
            self.current_visit_time = start_time
            self.visit_count += 1

    @classmethod
    def from_utma(cls, value, **kwargs):
        """
        Restore a visitor from an ``__utma`` cookie value, e.g.
        ``1.1234.1300000000.1300000000.1300000000.1``.

        :raises ValueError:
            If the cookie value is malformed.
        """
        parts = value.split('.')
        if len(parts) != 6:
            raise ValueError('The given "__utma" cookie value is invalid: %r'
                             % value)
        domain_hash, unique_id, first, previous, current, count = parts
        return cls(unique_id=int(unique_id),
                   first_visit_time=from_timestamp(first),
                   previous_visit_time=from_timestamp(previous),
                   current_visit_time=from_timestamp(current),
                   visit_count=int(count),
                   **kwargs)

    @classmethod
    def from_request(cls, request, **kwargs):
        """
        Build a visitor from the properties of an incoming request.

        :param request:
            The request of the visitor.
        :type request:
            webob.Request instance
        """
        visitor = cls(**kwargs)
        visitor.update_from_request(request)
        return visitor

    def update_from_request(self, request):
        self.ip_address = request.remote_addr
        self.user_agent = request.user_agent
        locale = first_language(request.headers.get('Accept-Language'))
        if locale:
            self.locale = locale

    def utma_parts(self):
        return (self.unique_id,
                to_timestamp(self.first_visit_time),
                to_timestamp(self.previous_visit_time),
                to_timestamp(self.current_visit_time),
                self.visit_count)


class Session(object):
    """
    One visit of a visitor, i.e. what the ``__utmb`` and ``__utmc`` cookies
    identify in a browser.

    The track count is mutated by every request fired against this session.
    The increment is not atomic: callers sharing a session between threads
    must serialize their tracking calls.
    """

    def __init__(self, session_id=None, track_count=0, start_time=None):
        self.session_id = (generate_32bit_random() if session_id is None
                           else session_id)
        self.track_count = track_count
        self.start_time = start_time or now()

    def increase_track_count(self, by=1):
        self.track_count += by

    @classmethod
    def from_utmb(cls, value):
        """
        Restore a session from an ``__utmb`` cookie value, e.g.
        ``1.3.10.1300000000``. The session id is not part of the cookie and
        gets newly generated.

        :raises ValueError:
            If the cookie value is malformed.
        """
        parts = value.split('.')
        if len(parts) != 4:
            raise ValueError('The given "__utmb" cookie value is invalid: %r'
                             % value)
        domain_hash, track_count, token, start_time = parts
        return cls(track_count=int(track_count),
                   start_time=from_timestamp(start_time))
