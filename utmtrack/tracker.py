import re
import logging

from .config import Config, WARN, RAISE
from .entities import CustomVariable
from .errors import ValidationError
from .request import (Request, PAGE, EVENT, TRANSACTION, ITEM, SOCIAL,
                      MAX_CUSTOM_VARIABLES)
from .transport.http import HTTPTransport
from .util import generate_hash


log = logging.getLogger(__name__)


account_id_re = re.compile(r'^(UA|MO)-[0-9]*-[0-9]*$')


class Tracker(object):
    """
    Sends tracking requests for one account and domain. A tracker is meant to
    live as long as the owning process and is shared by many tracking calls;
    its custom variables and campaign apply to every request it fires.

    Tracking calls against the same session or campaign must not run
    concurrently, the counters they increase are not protected by a lock.
    """

    def __init__(self, account_id, domain_name, config=None, transport=None,
                 allow_hash=True):
        """
        :param account_id:
            Account ID such as ``UA-1234567-8`` or ``MO-1234567-8``, sent as
            ``utmac``.
        :param domain_name:
            Host name such as ``www.example.com``, sent as ``utmhn``.
        :param config:
            Settings for this tracker. A default Config is created if omitted.
        :param transport:
            Object used to send requests, see utmtrack.transport. Defaults to
            an HTTPTransport for ``config``.
        :param allow_hash:
            Whether cookie values carry a hash of the domain name, or 1.
        """
        self.config = config or Config()
        self.transport = transport or HTTPTransport(self.config)
        self.custom_variables_by_index = {}
        self._campaign = None
        self._account_id = None
        self.account_id = account_id
        self.domain_name = domain_name
        self.allow_hash = allow_hash

    def report(self, error, advisory=False):
        """
        Handle a detected violation according to the configured error
        severity. Advisory errors are at most logged, never raised.

        :param error:
            The violation.
        :type error:
            utmtrack.errors.TrackingError
        """
        severity = self.config.error_severity
        if advisory and severity == RAISE:
            severity = WARN

        if severity == RAISE:
            raise error
        elif severity == WARN:
            log.warning('%s: %s', error.__class__.__name__, error)

    def check(self, entity):
        """
        Validate an entity, reporting any error. Returns False if the entity
        is invalid and the error was not raised.
        """
        try:
            entity.validate()
        except ValidationError as e:
            self.report(e)
            return False
        return True

    @property
    def account_id(self):
        return self._account_id

    @account_id.setter
    def account_id(self, value):
        if not value or not account_id_re.match(value):
            self.report(ValidationError(
                '%r is not a valid Google Analytics account ID.' % value))
        self._account_id = value

    def generate_domain_hash(self):
        if not self.allow_hash:
            return 1
        return generate_hash(self.domain_name)

    @property
    def custom_variables(self):
        return [self.custom_variables_by_index[index] for index
                in sorted(self.custom_variables_by_index)]

    def add_custom_variable(self, custom_variable):
        """
        Set a custom variable in its slot, replacing the variable which held
        that index before. Invalid variables are never added, whatever the
        error severity.

        :param custom_variable:
            Variable to add.
        :type custom_variable:
            utmtrack.entities.CustomVariable
        """
        if not self.check(custom_variable):
            return
        index = custom_variable.index
        if (index not in self.custom_variables_by_index and
                len(self.custom_variables_by_index) >= MAX_CUSTOM_VARIABLES):
            self.report(ValidationError(
                'The sum of all custom variables cannot exceed %d in any '
                'given request.' % MAX_CUSTOM_VARIABLES))
            return
        self.custom_variables_by_index[index] = custom_variable

    def remove_custom_variable(self, index):
        self.custom_variables_by_index.pop(index, None)

    def set_custom_variable(self, index, name, value,
                            scope=CustomVariable.SCOPE_PAGE):
        self.add_custom_variable(CustomVariable(index, name, value, scope))

    @property
    def campaign(self):
        return self._campaign

    @campaign.setter
    def campaign(self, value):
        if value is not None:
            self.check(value)
        self._campaign = value

    def fire(self, request):
        request.fire()
        return request

    def track_pageview(self, page, session, visitor):
        """
        Track a pageview.

        :returns:
            The fired request, holding the parameters sent and the cookie
            values to persist.
        :rtype:
            utmtrack.request.Request
        """
        self.check(page)
        return self.fire(Request(PAGE, self, session, visitor, page=page))

    def track_event(self, event, session, visitor):
        self.check(event)
        return self.fire(Request(EVENT, self, session, visitor, subject=event))

    def track_transaction(self, transaction, session, visitor):
        """
        Track a transaction and each of its items. Every item gets a request
        of its own after the transaction request. All of them are validated
        before the first one is sent.

        :returns:
            The fired requests, transaction first.
        :rtype:
            list of utmtrack.request.Request
        """
        self.check(transaction)
        items = transaction.items
        for item in items:
            self.check(item)

        requests = [Request(TRANSACTION, self, session, visitor,
                            subject=transaction)]
        requests += [Request(ITEM, self, session, visitor, subject=item)
                     for item in items]
        for request in requests:
            self.fire(request)
        return requests

    def track_social(self, social, page, session, visitor):
        self.check(social)
        self.check(page)
        return self.fire(Request(SOCIAL, self, session, visitor,
                                 subject=social, page=page))
