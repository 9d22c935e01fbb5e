"""
Plain data holders describing what gets tracked. Each one knows which of its
fields are required and raises ValidationError from ``validate()`` when they
are missing; the tracker decides what happens with that error.
"""

from urllib.parse import urlsplit

from .errors import ValidationError
from .util import from_timestamp, now


class CustomVariable(object):
    SCOPE_VISITOR = 1
    SCOPE_SESSION = 2
    SCOPE_PAGE = 3

    MIN_INDEX = 1
    MAX_INDEX = 5

    def __init__(self, index=None, name=None, value=None, scope=SCOPE_PAGE):
        self.index = index
        self.name = name
        self.value = value
        self.scope = scope

    def validate(self):
        if self.name is None or self.value is None:
            raise ValidationError('Custom Variables need to have a name and '
                                  'value.')
        index = self.index
        if (not isinstance(index, int) or isinstance(index, bool) or
                not self.MIN_INDEX <= index <= self.MAX_INDEX):
            raise ValidationError('Custom Variable index has to be between '
                                  '%d and %d, got %r.' %
                                  (self.MIN_INDEX, self.MAX_INDEX, self.index))
        if self.scope not in (self.SCOPE_VISITOR, self.SCOPE_SESSION,
                              self.SCOPE_PAGE):
            raise ValidationError('Custom Variable scope %r is not one of '
                                  'visitor (1), session (2) or page (3).' %
                                  self.scope)

    def __repr__(self):
        return '<CustomVariable %r %r=%r scope=%r>' % (
            self.index, self.name, self.value, self.scope)


class Campaign(object):
    """
    How a visitor arrived at the site, reported through the ``__utmz`` cookie
    value.

    The response count is mutated by every request fired while the campaign
    is attached to a tracker; like the session track count it is not safe to
    share between threads without external locking.
    """
    TYPE_DIRECT = 'direct'
    TYPE_ORGANIC = 'organic'
    TYPE_REFERRAL = 'referral'

    # Campaign field name -> __utmz key, in the order they are serialized.
    utmz_keys = (
        ('id', 'utmcid'),
        ('source', 'utmcsr'),
        ('g_click_id', 'utmgclid'),
        ('d_click_id', 'utmdclid'),
        ('name', 'utmccn'),
        ('medium', 'utmcmd'),
        ('term', 'utmctr'),
        ('content', 'utmcct'),
    )

    def __init__(self, type=None, id=None, source=None, medium=None,
                 term=None, content=None, name=None, g_click_id=None,
                 d_click_id=None, creation_time=None, response_count=0):
        self.type = type
        self.id = id
        self.source = source
        self.medium = medium
        self.term = term
        self.content = content
        self.name = name
        self.g_click_id = g_click_id
        self.d_click_id = d_click_id
        self.creation_time = creation_time or now()
        self.response_count = response_count

        if type == self.TYPE_DIRECT:
            self.name = name or '(direct)'
            self.source = source or '(direct)'
            self.medium = medium or '(none)'
        elif type == self.TYPE_ORGANIC:
            # Source is the search engine and has to be set by the caller.
            self.name = name or '(organic)'
            self.medium = medium or 'organic'
        elif type == self.TYPE_REFERRAL:
            self.name = name or '(referral)'
            self.medium = medium or 'referral'
        elif type is not None:
            raise ValueError('Campaign type has to be one of direct, organic '
                             'or referral, got %r.' % type)

    def validate(self):
        if not self.source:
            raise ValidationError('Campaigns need to have at least the '
                                  '"source" attribute defined.')

    def increase_response_count(self, by=1):
        self.response_count += by

    def utmz_fields(self):
        for attr, key in self.utmz_keys:
            value = getattr(self, attr)
            if value is not None and value != '':
                yield key, value

    @classmethod
    def from_referrer(cls, url):
        parts = urlsplit(url)
        return cls(cls.TYPE_REFERRAL, source=parts.hostname,
                   content=parts.path or None)

    @classmethod
    def from_utmz(cls, value):
        """
        Restore a campaign from an ``__utmz`` cookie value, e.g.
        ``1.1300000000.1.1.utmcsr=google|utmcmd=cpc``.

        :raises ValueError:
            If the cookie value is malformed.
        """
        parts = value.split('.', 4)
        if len(parts) != 5:
            raise ValueError('The given "__utmz" cookie value is invalid: %r'
                             % value)
        domain_hash, creation_time, visit_count, response_count, data = parts

        attrs = {key: attr for attr, key in cls.utmz_keys}
        kwargs = {}
        for pair in data.split('|'):
            if '=' not in pair:
                continue
            key, val = pair.split('=', 1)
            if key in attrs:
                kwargs[attrs[key]] = val.replace('%20', ' ')

        return cls(creation_time=from_timestamp(creation_time),
                   response_count=int(response_count), **kwargs)


class Page(object):
    # Referrer value for visits coming from within the same site.
    REFERRER_INTERNAL = '0'

    def __init__(self, path, title=None, charset=None, referrer=None,
                 load_time=None):
        """
        :param path:
            Path of the page, has to start with a slash.
        :param load_time:
            Page load time in milliseconds, reported as site speed.
        """
        self.path = path
        self.title = title
        self.charset = charset
        self.referrer = referrer
        self.load_time = load_time

    def validate(self):
        if not self.path or not self.path.startswith('/'):
            raise ValidationError('The page path should always start with a '
                                  'slash ("/"), got %r.' % self.path)


class Event(object):

    def __init__(self, category=None, action=None, label=None, value=None,
                 noninteraction=False):
        self.category = category
        self.action = action
        self.label = label
        self.value = value
        self.noninteraction = noninteraction

    def validate(self):
        if not self.category or not self.action:
            raise ValidationError('Events need at least to have a category '
                                  'and action defined.')
        if self.value is not None and not isinstance(self.value, int):
            raise ValidationError('Event values have to be integers, got %r.'
                                  % self.value)


class Item(object):

    def __init__(self, sku=None, name=None, variation=None, price=None,
                 quantity=1, order_id=None):
        self.order_id = order_id
        self.sku = sku
        self.name = name
        self.variation = variation
        self.price = price
        self.quantity = quantity

    def validate(self):
        if self.sku is None:
            raise ValidationError('Items need to have a sku/product code '
                                  'defined.')


class Transaction(object):

    def __init__(self, order_id=None, affiliation=None, total=None, tax=None,
                 shipping=None, city=None, region=None, country=None):
        self._order_id = order_id
        self.affiliation = affiliation
        self.total = total
        self.tax = tax
        self.shipping = shipping
        self.city = city
        self.region = region
        self.country = country
        self._items = {}

    @property
    def order_id(self):
        return self._order_id

    @order_id.setter
    def order_id(self, value):
        self._order_id = value
        for item in self._items.values():
            item.order_id = value

    @property
    def items(self):
        return list(self._items.values())

    def add_item(self, item):
        """
        Add an item, replacing any previous item with the same SKU. The item
        inherits the order id of this transaction.
        """
        item.order_id = self._order_id
        self._items[item.sku] = item

    def validate(self):
        if not self._items:
            raise ValidationError('Transactions need to consist of at least '
                                  'one item.')


class SocialInteraction(object):

    def __init__(self, network=None, action=None, target=None):
        """
        :param target:
            Target of the interaction, e.g. the shared URL. Defaults to the
            path of the page it was tracked on.
        """
        self.network = network
        self.action = action
        self.target = target

    def validate(self):
        if not self.network or not self.action:
            raise ValidationError('Social interactions need to have at least '
                                  'the "network" and "action" attributes '
                                  'defined.')
