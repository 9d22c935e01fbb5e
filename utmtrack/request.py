"""
Construction and sending of a single tracking request.

A request is one of a closed set of kinds. Every kind shares the same
parameter assembly (account, visitor, custom variables, campaign and cookie
parameters) and adds its own fields through a builder looked up by kind.
"""

import math
import random
import logging

from .cookies import cookie_values
from .entities import CustomVariable
from .errors import (TrackingError, ValidationError, QuotaAdvisory,
                     TransportError)
from .parameters import ParameterHolder
from .util import (anonymize_ip, encode_uri_component, generate_32bit_random,
                   to_timestamp)
from . import x10


log = logging.getLogger(__name__)


# Version of the browser client whose requests these mirror, sent as utmwv.
VERSION = '5.2.5'

PAGE = 'page'
EVENT = 'event'
TRANSACTION = 'transaction'
ITEM = 'item'
SOCIAL = 'social'

# Request kind -> utmt discriminator. Pageviews carry no utmt at all.
request_types = {
    PAGE: None,
    EVENT: 'event',
    TRANSACTION: 'tran',
    ITEM: 'item',
    SOCIAL: 'social',
}

# The browser script omits visitor and custom variable parameters from
# e-commerce requests.
commerce_kinds = (TRANSACTION, ITEM)

# The collection endpoint does not guarantee to process more requests than
# this per session.
SESSION_REQUEST_LIMIT = 500

MAX_CUSTOM_VARIABLES = 5

CAMPAIGN_DELIMITER = '|'

# Fixed third field of __utmb. Its meaning is unknown, the browser script
# always writes 10.
UTMB_TOKEN = 10

UTME_DELIMITER = ','

# Request states
CONSTRUCTED = 'constructed'
BUILT = 'built'
FIRED = 'fired'
COMPLETE = 'complete'
FAILED = 'failed'


def append_utme(p, value):
    if not value:
        return
    if p.utme:
        p.utme = p.utme + UTME_DELIMITER + value
    else:
        p.utme = value


def build_page_parameters(request, p):
    page = request.page
    p.utmp = page.path
    p.utmdt = page.title
    if page.charset is not None:
        p.utmcs = page.charset
    if page.referrer is not None:
        p.utmr = page.referrer

    load_time = page.load_time
    if load_time and (random.randint(0, 100) <
                      request.tracker.config.sitespeed_sample_rate):
        # Load times are bucketed in 100ms steps, capped at 500 seconds.
        key = int(max(min(math.floor(load_time / 100), 5000), 0) * 100)
        enc = x10.X10()
        enc.clear_key(x10.SITESPEED_PROJECT_ID)
        enc.clear_value(x10.SITESPEED_PROJECT_ID)
        enc.set_key(x10.SITESPEED_PROJECT_ID, x10.OBJECT_KEY_NUM, key)
        enc.set_value(x10.SITESPEED_PROJECT_ID, x10.VALUE_VALUE_NUM,
                      load_time)
        append_utme(p, enc.render_url_string())


def build_event_parameters(request, p):
    event = request.subject
    enc = x10.X10()
    enc.clear_key(x10.EVENT_PROJECT_ID)
    enc.clear_value(x10.EVENT_PROJECT_ID)
    enc.set_key(x10.EVENT_PROJECT_ID, x10.OBJECT_KEY_NUM, event.category)
    enc.set_key(x10.EVENT_PROJECT_ID, x10.TYPE_KEY_NUM, event.action)
    enc.set_key(x10.EVENT_PROJECT_ID, x10.LABEL_KEY_NUM, event.label)
    enc.set_value(x10.EVENT_PROJECT_ID, x10.VALUE_VALUE_NUM, event.value)
    append_utme(p, enc.render_url_string())

    if event.noninteraction:
        p.utmni = 1


def build_transaction_parameters(request, p):
    transaction = request.subject
    p.utmtid = transaction.order_id
    p.utmtst = transaction.affiliation
    p.utmtto = transaction.total
    p.utmttx = transaction.tax
    p.utmtsp = transaction.shipping
    p.utmtci = transaction.city
    p.utmtrg = transaction.region
    p.utmtco = transaction.country


def build_item_parameters(request, p):
    item = request.subject
    p.utmtid = item.order_id
    p.utmipc = item.sku
    p.utmipn = item.name
    p.utmiva = item.variation
    p.utmipr = item.price
    p.utmiqt = item.quantity


def build_social_parameters(request, p):
    build_page_parameters(request, p)
    social = request.subject
    p.utmsn = social.network
    p.utmsa = social.action
    p.utmsid = social.target
    if p.utmsid is None:
        # Like the browser script, default to the page path.
        p.utmsid = request.page.path


_type_builders = {
    PAGE: build_page_parameters,
    EVENT: build_event_parameters,
    TRANSACTION: build_transaction_parameters,
    ITEM: build_item_parameters,
    SOCIAL: build_social_parameters,
}


class Request(object):
    """
    One tracking call. A request goes through ``constructed``, ``built``,
    ``fired`` and finally ``complete`` or ``failed``, and cannot be fired
    again afterwards.
    """

    def __init__(self, kind, tracker, session, visitor, subject=None,
                 page=None):
        """
        :param kind:
            One of PAGE, EVENT, TRANSACTION, ITEM or SOCIAL.
        :param subject:
            The tracked entity for kinds other than PAGE: an Event,
            Transaction, Item or SocialInteraction.
        :param page:
            The Page for PAGE and SOCIAL requests.
        """
        if kind not in request_types:
            raise ValueError('Unknown request kind %r' % kind)
        self.kind = kind
        self.tracker = tracker
        self.session = session
        self.visitor = visitor
        self.subject = subject
        self.page = page

        self.state = CONSTRUCTED
        self.parameters = None
        self.headers = None
        self.cookies = None

    def __repr__(self):
        return '<Request %s %s>' % (self.kind, self.state)

    @property
    def type(self):
        return request_types[self.kind]

    def validate(self):
        """
        Check tracker state that would make this request invalid. Runs before
        any counter is touched.
        """
        num = len(self.tracker.custom_variables)
        if num > MAX_CUSTOM_VARIABLES:
            self.tracker.report(ValidationError(
                'The sum of all custom variables cannot exceed %d in any '
                'given request, got %d.' % (MAX_CUSTOM_VARIABLES, num)))

    def check_session_quota(self):
        track_count = self.session.track_count + 1
        if track_count > SESSION_REQUEST_LIMIT:
            advisory = not self.tracker.config.enforce_session_limit
            self.tracker.report(QuotaAdvisory(
                'Request %d of session %s: no more than %d requests per '
                'session are guaranteed to be processed.' %
                (track_count, self.session.session_id,
                 SESSION_REQUEST_LIMIT)), advisory=advisory)

    def build_parameters(self):
        """
        Assemble the full parameter set. The order of the steps matters: the
        session track count has to be increased beforehand and the domain hash
        is shared by the campaign and cookie parameters.

        :rtype:
            utmtrack.parameters.ParameterHolder
        """
        tracker = self.tracker

        p = ParameterHolder(utmwv=VERSION)
        p.utmac = tracker.account_id
        p.utmhn = tracker.domain_name
        p.utmt = self.type
        p.utmn = generate_32bit_random()

        # utmip is only evaluated by the endpoint for mobile (MO-) accounts.
        p.utmip = self.visitor.ip_address
        if tracker.config.anonymize_ip_addresses:
            p.aip = 1
            p.utmip = anonymize_ip(p.utmip)

        p.utmhid = self.session.session_id
        p.utms = self.session.track_count

        if self.kind not in commerce_kinds:
            self.build_visitor_parameters(p)
            self.build_custom_variables_parameter(p)

        domain_hash = tracker.generate_domain_hash()
        self.build_campaign_parameters(p, domain_hash)
        self.build_cookie_parameters(p, domain_hash)

        _type_builders[self.kind](self, p)

        self.state = BUILT
        return p

    def build_visitor_parameters(self, p):
        visitor = self.visitor
        if visitor.locale is not None:
            p.utmul = visitor.locale.replace('_', '-').lower()
        if visitor.flash_version is not None:
            p.utmfl = visitor.flash_version
        if visitor.java_enabled is not None:
            p.utmje = 1 if visitor.java_enabled else 0
        if visitor.screen_color_depth is not None:
            p.utmsc = '%s-bit' % visitor.screen_color_depth
        p.utmsr = visitor.screen_resolution

    def build_custom_variables_parameter(self, p):
        custom_vars = self.tracker.custom_variables
        if not custom_vars:
            return

        enc = x10.X10()
        enc.clear_key(x10.CUSTOMVAR_NAME_PROJECT_ID)
        enc.clear_key(x10.CUSTOMVAR_VALUE_PROJECT_ID)
        enc.clear_key(x10.CUSTOMVAR_SCOPE_PROJECT_ID)

        for var in custom_vars:
            # Names and values are URI-encoded before X10 escaping, as the
            # browser script does.
            enc.set_key(x10.CUSTOMVAR_NAME_PROJECT_ID, var.index,
                        encode_uri_component(var.name))
            enc.set_key(x10.CUSTOMVAR_VALUE_PROJECT_ID, var.index,
                        encode_uri_component(var.value))
            if (var.scope is not None and
                    var.scope != CustomVariable.SCOPE_PAGE):
                enc.set_key(x10.CUSTOMVAR_SCOPE_PROJECT_ID, var.index,
                            var.scope)

        append_utme(p, enc.render_url_string())

    def build_campaign_parameters(self, p, domain_hash):
        campaign = self.tracker.campaign
        if not campaign:
            return

        utmz = '%s.%d.%d.%d.' % (domain_hash,
                                 to_timestamp(campaign.creation_time),
                                 self.visitor.visit_count,
                                 campaign.response_count)
        for key, value in campaign.utmz_fields():
            # Only spaces and pluses get escaped by the browser script.
            value = str(value).replace('+', '%20').replace(' ', '%20')
            utmz += '%s=%s%s' % (key, value, CAMPAIGN_DELIMITER)
        p['__utmz'] = utmz.rstrip(CAMPAIGN_DELIMITER)

    def build_cookie_parameters(self, p, domain_hash):
        p['__utma'] = '%s.%d.%d.%d.%d.%d' % (
            (domain_hash,) + self.visitor.utma_parts())
        p['__utmb'] = '%s.%d.%d.%d' % (domain_hash, self.session.track_count,
                                       UTMB_TOKEN,
                                       to_timestamp(self.session.start_time))
        p['__utmc'] = domain_hash

        cookies = ['__utma=%s;' % p['__utma']]
        if p['__utmz']:
            cookies.append('__utmz=%s;' % p['__utmz'])
        p.utmcc = '+'.join(cookies)

    def build_headers(self, p):
        headers = {}
        if self.visitor.user_agent:
            headers['User-Agent'] = self.visitor.user_agent
        if p.utmip:
            headers['X-Forwarded-For'] = p.utmip
        return headers

    def fire(self):
        """
        Send this request through the tracker's transport.

        :returns:
            Cookie values to persist, mapping cookie name to CookieValue.
        :raises utmtrack.errors.TransportError:
            If the transport failed. The request is not retried.
        """
        if self.state != CONSTRUCTED:
            raise TrackingError('%r has already been built or fired.' % self)

        self.validate()
        self.check_session_quota()

        self.session.increase_track_count()
        campaign = self.tracker.campaign
        if campaign:
            campaign.increase_response_count()

        p = self.build_parameters()
        headers = self.build_headers(p)

        log.debug('Firing %s request %s for session %s', self.kind, p.utmn,
                  self.session.session_id)
        self.state = FIRED
        try:
            self.tracker.transport.send(p.to_query_string(), headers)
        except TransportError:
            self.state = FAILED
            raise

        self.parameters = p
        self.headers = headers
        self.cookies = cookie_values(p)
        self.state = COMPLETE
        return self.cookies
