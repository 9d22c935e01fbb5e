SILENT = 'silent'
WARN = 'warn'
RAISE = 'raise'

error_severities = (SILENT, WARN, RAISE)


class Config(object):
    """
    Settings shared by all requests of a tracker. Treat an instance as
    read-only once it has been handed to a tracker.
    """
    SILENT = SILENT
    WARN = WARN
    RAISE = RAISE

    def __init__(self, error_severity=RAISE, anonymize_ip_addresses=False,
                 sitespeed_sample_rate=1, enforce_session_limit=False,
                 endpoint_host='www.google-analytics.com',
                 endpoint_path='/__utm.gif', use_https=False,
                 request_timeout=1.0):
        """
        :param error_severity:
            What to do with detected violations: ``silent`` ignores them,
            ``warn`` logs them and carries on, ``raise`` raises them.
        :param anonymize_ip_addresses:
            If True, the last block of the visitor IP is zeroed and the
            ``aip`` flag is sent.
        :param sitespeed_sample_rate:
            Percentage (0-100) of pageviews with a load time that also report
            site speed.
        :param enforce_session_limit:
            If True, going past 500 requests per session is reported with the
            regular error severity instead of only being logged.
        :param request_timeout:
            Seconds to wait for the collection endpoint.
        """
        if error_severity not in error_severities:
            raise ValueError('Unknown error severity %r' % error_severity)
        self.error_severity = error_severity
        self.anonymize_ip_addresses = anonymize_ip_addresses
        self.sitespeed_sample_rate = sitespeed_sample_rate
        self.enforce_session_limit = enforce_session_limit
        self.endpoint_host = endpoint_host
        self.endpoint_path = endpoint_path
        self.use_https = use_https
        self.request_timeout = request_timeout

    @property
    def endpoint_url(self):
        scheme = 'https' if self.use_https else 'http'
        return '%s://%s%s' % (scheme, self.endpoint_host, self.endpoint_path)
