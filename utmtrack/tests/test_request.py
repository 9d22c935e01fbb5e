from urllib.parse import parse_qsl

from utmtrack import request as rq
from utmtrack.config import Config
from utmtrack.cookies import CookieValue
from utmtrack.entities import (Campaign, CustomVariable, Event, Item, Page,
                               SocialInteraction, Transaction)
from utmtrack.errors import (QuotaAdvisory, TrackingError, TransportError,
                             ValidationError)
from utmtrack.request import Request
from utmtrack.transport.memory import MemoryTransport

from .base import BaseTest, domain_hash, first_visit


utma = '%d.1234.1300000000.1300086400.1300090000.3' % domain_hash


class TestPageviewRequest(BaseTest):

    def fire(self, page=None):
        page = page or Page('/products/shoes', title='Hello World')
        request = Request(rq.PAGE, self.tracker, self.session, self.visitor,
                          page=page)
        request.fire()
        return request

    def test_parameters(self):
        p = self.fire().parameters
        self.assertEqual(p.utmwv, '5.2.5')
        self.assertEqual(p.utmac, 'UA-1234567-8')
        self.assertEqual(p.utmhn, 'www.example.com')
        self.assertIsNone(p.utmt)
        self.assertIsInstance(p.utmn, int)
        self.assertEqual(p.utmip, '203.0.113.55')
        self.assertIsNone(p.aip)
        self.assertEqual(p.utmhid, 4321)
        self.assertEqual(p.utms, 1)
        self.assertEqual(p.utmul, 'de-de')
        self.assertEqual(p.utmsc, '24-bit')
        self.assertEqual(p.utmsr, '1024x768')
        self.assertEqual(p.utmp, '/products/shoes')
        self.assertEqual(p.utmdt, 'Hello World')
        self.assertIsNone(p.utme)

    def test_cookie_parameters(self):
        p = self.fire().parameters
        self.assertEqual(p['__utma'], utma)
        self.assertEqual(p['__utmb'], '%d.1.10.1300090000' % domain_hash)
        self.assertEqual(p['__utmc'], domain_hash)
        self.assertIsNone(p['__utmz'])
        self.assertEqual(p.utmcc, '__utma=%s;' % utma)

    def test_cookie_values(self):
        cookies = self.fire().cookies
        self.assertEqual(sorted(cookies), ['__utma', '__utmb', '__utmc'])
        self.assertEqual(cookies['__utma'], CookieValue(utma, 63072000))
        self.assertEqual(cookies['__utmb'].expiry_seconds, 1800)
        self.assertEqual(cookies['__utmc'],
                         CookieValue(str(domain_hash), 0))

    def test_query_string_and_headers(self):
        self.fire()
        [(query_string, headers)] = self.sent()
        self.assertIn('utmdt=Hello%20World', query_string)
        self.assertNotIn('+', query_string)
        params = dict(parse_qsl(query_string))
        self.assertEqual(params['utmcc'], '__utma=%s;' % utma)
        self.assertNotIn('utmt', params)
        self.assertEqual(headers['X-Forwarded-For'], '203.0.113.55')
        self.assertEqual(headers['User-Agent'],
                         'Mozilla/5.0 (X11; Linux x86_64)')

    def test_anonymize_ip(self):
        self.config.anonymize_ip_addresses = True
        request = self.fire()
        self.assertEqual(request.parameters.utmip, '203.0.113.0')
        self.assertEqual(request.parameters.aip, 1)
        self.assertEqual(request.headers['X-Forwarded-For'], '203.0.113.0')

    def test_domain_hash_disabled(self):
        self.tracker.allow_hash = False
        p = self.fire().parameters
        self.assertEqual(p['__utmc'], 1)
        self.assertTrue(p['__utma'].startswith('1.1234.'))
        self.assertTrue(p['__utmb'].startswith('1.1.10.'))

    def test_referrer_and_charset(self):
        page = Page('/', charset='UTF-8', referrer=Page.REFERRER_INTERNAL)
        p = self.fire(page).parameters
        self.assertEqual(p.utmcs, 'UTF-8')
        self.assertEqual(p.utmr, '0')
        self.assertIsNone(p.utmdt)

    def test_site_speed(self):
        self.config.sitespeed_sample_rate = 101
        p = self.fire(Page('/', load_time=1530)).parameters
        self.assertEqual(p.utme, '14!1:1500,14v!1:1530')

    def test_site_speed_capped(self):
        self.config.sitespeed_sample_rate = 101
        p = self.fire(Page('/', load_time=900000)).parameters
        self.assertEqual(p.utme, '14!1:500000,14v!1:900000')

    def test_site_speed_not_sampled(self):
        self.config.sitespeed_sample_rate = 0
        p = self.fire(Page('/', load_time=1530)).parameters
        self.assertIsNone(p.utme)

    def test_cannot_fire_twice(self):
        request = self.fire()
        self.assertEqual(request.state, rq.COMPLETE)
        with self.assertRaises(TrackingError):
            request.fire()
        self.assertEqual(len(self.sent()), 1)

    def test_unknown_kind(self):
        with self.assertRaises(ValueError):
            Request('var', self.tracker, self.session, self.visitor)

    def test_transport_failure(self):
        self.tracker.transport = MemoryTransport(fail=True)
        request = Request(rq.PAGE, self.tracker, self.session, self.visitor,
                          page=Page('/'))
        with self.assertRaises(TransportError):
            request.fire()
        self.assertEqual(request.state, rq.FAILED)
        self.assertIsNone(request.cookies)
        self.assertIsNone(request.parameters)
        self.assertEqual(self.session.track_count, 1)


class TestCustomVariables(BaseTest):

    def fire(self):
        request = Request(rq.PAGE, self.tracker, self.session, self.visitor,
                          page=Page('/'))
        request.fire()
        return request.parameters

    def test_default_scope(self):
        self.tracker.set_custom_variable(2, 'name2', 'value2')
        self.tracker.set_custom_variable(1, 'name', 'value')
        self.assertEqual(self.fire().utme,
                         '8!1:name*2:name2,9!1:value*2:value2')

    def test_five_variables(self):
        for index in range(1, 6):
            self.tracker.set_custom_variable(index, 'n%d' % index,
                                             'v%d' % index)
        self.assertEqual(self.fire().utme,
                         '8!1:n1*2:n2*3:n3*4:n4*5:n5,'
                         '9!1:v1*2:v2*3:v3*4:v4*5:v5')

    def test_scopes(self):
        self.tracker.set_custom_variable(1, 'a', 'b')
        self.tracker.set_custom_variable(2, 'c', 'd',
                                         CustomVariable.SCOPE_VISITOR)
        self.tracker.set_custom_variable(3, 'e', 'f',
                                         CustomVariable.SCOPE_SESSION)
        self.assertEqual(self.fire().utme,
                         '8!1:a*2:c*3:e,9!1:b*2:d*3:f,11!2:1*3:2')

    def test_encoding(self):
        self.tracker.set_custom_variable(1, 'my var', "it's (ok), 100%")
        self.assertEqual(self.fire().utme,
                         '8!1:my%20var,9!1:it%27s%20%28ok%29%2C%20100%25')

    def test_too_many_variables(self):
        for index in range(1, 7):
            self.tracker.custom_variables_by_index[index] = CustomVariable(
                index, 'n', 'v')
        request = Request(rq.PAGE, self.tracker, self.session, self.visitor,
                          page=Page('/'))
        with self.assertRaises(ValidationError):
            request.fire()
        self.assertEqual(self.session.track_count, 0)
        self.assertEqual(request.state, rq.CONSTRUCTED)
        self.assertEqual(self.sent(), [])

    def test_not_sent_with_transactions(self):
        self.tracker.set_custom_variable(1, 'a', 'b')
        transaction = Transaction('1001')
        transaction.add_item(Item('SKU-1'))
        request = Request(rq.TRANSACTION, self.tracker, self.session,
                          self.visitor, subject=transaction)
        request.fire()
        self.assertIsNone(request.parameters.utme)
        self.assertIsNone(request.parameters.utmul)
        self.assertIsNone(request.parameters.utmsr)


class TestCampaign(BaseTest):

    def fire(self):
        request = Request(rq.PAGE, self.tracker, self.session, self.visitor,
                          page=Page('/'))
        request.fire()
        return request

    def test_utmz(self):
        self.tracker.campaign = Campaign(id='123', source='google',
                                         medium='cpc',
                                         creation_time=first_visit)
        request = self.fire()
        utmz = '%d.1300000000.3.1.utmcid=123|utmcsr=google|utmcmd=cpc' % \
            domain_hash
        p = request.parameters
        self.assertEqual(p['__utmz'], utmz)
        self.assertEqual(p.utmcc, '__utma=%s;+__utmz=%s;' % (utma, utmz))
        self.assertEqual(request.cookies['__utmz'], CookieValue(utmz, 0))

    def test_field_order_and_escaping(self):
        self.tracker.campaign = Campaign(
            id='7', source='google', g_click_id='gc', d_click_id='dc',
            name='spring sale', medium='cpc', term='red shoes+boots',
            content='ad|1', creation_time=first_visit)
        utmz = self.fire().parameters['__utmz']
        self.assertTrue(utmz.endswith(
            '.utmcid=7|utmcsr=google|utmgclid=gc|utmdclid=dc|'
            'utmccn=spring%20sale|utmcmd=cpc|utmctr=red%20shoes%20boots|'
            'utmcct=ad|1'))

    def test_empty_fields_omitted(self):
        self.tracker.campaign = Campaign(source='google', medium='',
                                         creation_time=first_visit)
        utmz = self.fire().parameters['__utmz']
        self.assertTrue(utmz.endswith('.1.utmcsr=google'))

    def test_response_count(self):
        campaign = Campaign(Campaign.TYPE_DIRECT, creation_time=first_visit)
        self.tracker.campaign = campaign
        self.fire()
        request = self.fire()
        self.assertEqual(campaign.response_count, 2)
        self.assertIn('.3.2.utmcsr=(direct)|utmccn=(direct)|utmcmd=(none)',
                      request.parameters['__utmz'])


class TestSessionQuota(BaseTest):

    def fire(self):
        request = Request(rq.EVENT, self.tracker, self.session, self.visitor,
                          subject=Event('c', 'a'))
        request.fire()
        return request

    def test_advisory_only(self):
        counts = []
        for ii in range(500):
            counts.append(self.fire().parameters.utms)
        with self.assertLogs('utmtrack.tracker', 'WARNING') as cm:
            counts.append(self.fire().parameters.utms)
        self.assertIn('QuotaAdvisory', cm.output[0])
        self.assertEqual(counts, list(range(1, 502)))
        self.assertEqual(self.session.track_count, 501)
        self.assertEqual(len(self.sent()), 501)

    def test_enforced(self):
        self.config.enforce_session_limit = True
        self.session.track_count = 500
        with self.assertRaises(QuotaAdvisory):
            self.fire()
        self.assertEqual(self.session.track_count, 500)
        self.assertEqual(self.sent(), [])

    def test_enforced_with_warnings(self):
        self.config.enforce_session_limit = True
        self.config.error_severity = Config.WARN
        self.session.track_count = 500
        with self.assertLogs('utmtrack.tracker', 'WARNING'):
            self.fire()
        self.assertEqual(self.session.track_count, 501)


class TestOtherRequests(BaseTest):

    def test_event(self):
        request = Request(rq.EVENT, self.tracker, self.session, self.visitor,
                          subject=Event('Videos', 'Play', 'Intro', 42,
                                        noninteraction=True))
        request.fire()
        p = request.parameters
        self.assertEqual(p.utmt, 'event')
        self.assertEqual(p.utme, '5!1:Videos*2:Play*3:Intro,5v!1:42')
        self.assertEqual(p.utmni, 1)
        self.assertIsNone(p.utmp)

    def test_event_after_custom_variables(self):
        self.tracker.set_custom_variable(1, 'a', 'b')
        request = Request(rq.EVENT, self.tracker, self.session, self.visitor,
                          subject=Event('Videos', 'Play', value=0))
        request.fire()
        self.assertEqual(request.parameters.utme,
                         '8!1:a,9!1:b,5!1:Videos*2:Play,5v!1:0')
        self.assertIsNone(request.parameters.utmni)

    def test_transaction(self):
        transaction = Transaction('1001', affiliation='Shop', total=30.5,
                                  tax=2.5, shipping=3, city='Berlin',
                                  region='BE', country='DE')
        transaction.add_item(Item('SKU-1'))
        request = Request(rq.TRANSACTION, self.tracker, self.session,
                          self.visitor, subject=transaction)
        request.fire()
        p = request.parameters
        self.assertEqual(p.utmt, 'tran')
        self.assertEqual((p.utmtid, p.utmtst, p.utmtto, p.utmttx, p.utmtsp,
                          p.utmtci, p.utmtrg, p.utmtco),
                         ('1001', 'Shop', 30.5, 2.5, 3, 'Berlin', 'BE', 'DE'))
        self.assertEqual(p['__utma'], utma)

    def test_item(self):
        item = Item('SKU-1', name='Shoe', variation='Red', price=9.99,
                    quantity=2, order_id='1001')
        request = Request(rq.ITEM, self.tracker, self.session, self.visitor,
                          subject=item)
        request.fire()
        p = request.parameters
        self.assertEqual(p.utmt, 'item')
        self.assertEqual((p.utmtid, p.utmipc, p.utmipn, p.utmiva, p.utmipr,
                          p.utmiqt),
                         ('1001', 'SKU-1', 'Shoe', 'Red', 9.99, 2))

    def test_social(self):
        request = Request(rq.SOCIAL, self.tracker, self.session, self.visitor,
                          subject=SocialInteraction('facebook', 'like'),
                          page=Page('/articles/1', title='Article'))
        request.fire()
        p = request.parameters
        self.assertEqual(p.utmt, 'social')
        self.assertEqual((p.utmsn, p.utmsa, p.utmsid),
                         ('facebook', 'like', '/articles/1'))
        self.assertEqual(p.utmp, '/articles/1')
        self.assertEqual(p.utmdt, 'Article')

    def test_social_target(self):
        social = SocialInteraction('twitter', 'tweet',
                                   'http://example.com/a')
        request = Request(rq.SOCIAL, self.tracker, self.session, self.visitor,
                          subject=social, page=Page('/a'))
        request.fire()
        self.assertEqual(request.parameters.utmsid, 'http://example.com/a')
