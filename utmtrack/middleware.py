import logging

from webob import Request

from .cookies import apply_cookies
from .entities import Page
from .errors import TransportError
from .visitor import Visitor, Session


log = logging.getLogger(__name__)


class TrackingMiddleware(object):
    """
    WSGI middleware which restores the visitor and session of a request from
    its tracking cookies, optionally tracks a pageview and writes back the
    cookie values of the last request fired while handling it.

    The wrapped application finds the visitor and session in
    ``environ['utmtrack.visitor']`` and ``environ['utmtrack.session']``.
    Requests it fires itself should be appended to
    ``environ['utmtrack.requests']`` so that their cookies get persisted.
    """

    def __init__(self, app, tracker, track_pageviews=True, cookie_domain=None):
        self.app = app
        self.tracker = tracker
        self.track_pageviews = track_pageviews
        self.cookie_domain = cookie_domain

    def count_page(self, req):
        return (req.method == 'GET' and
                req.headers.get('X-Purpose') != 'preview')

    def get_visitor(self, req):
        value = req.cookies.get('__utma')
        visitor = None
        fresh = True
        if value:
            try:
                visitor = Visitor.from_utma(value)
                fresh = False
            except ValueError as e:
                log.info('Ignoring cookie: %s', e)
        if visitor is None:
            visitor = Visitor()
        visitor.update_from_request(req)
        return visitor, fresh

    def get_session(self, req, visitor, fresh):
        value = req.cookies.get('__utmb')
        if value:
            try:
                return Session.from_utmb(value)
            except ValueError as e:
                log.info('Ignoring cookie: %s', e)
        if fresh:
            return Session(start_time=visitor.current_visit_time)
        session = Session()
        visitor.add_session(session)
        return session

    def track_page(self, req, visitor, session):
        page = Page(req.path_info or '/', referrer=req.referer)
        try:
            return self.tracker.track_pageview(page, session, visitor)
        except TransportError as e:
            log.warning('Could not track pageview of %s: %s', req.path_info,
                        e)

    def __call__(self, environ, start_response):
        req = Request(environ)

        visitor, fresh = self.get_visitor(req)
        session = self.get_session(req, visitor, fresh)

        req.environ['utmtrack.visitor'] = visitor
        req.environ['utmtrack.session'] = session
        req.environ['utmtrack.requests'] = fired = []

        resp = req.get_response(self.app)

        if self.track_pageviews and self.count_page(req):
            request = self.track_page(req, visitor, session)
            if request:
                fired.append(request)

        completed = [r for r in fired if r.cookies]
        if completed:
            apply_cookies(resp, completed[-1].cookies,
                          domain=self.cookie_domain)

        return resp(environ, start_response)
