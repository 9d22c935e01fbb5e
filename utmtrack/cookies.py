from collections import namedtuple


# Lifetimes in seconds, 0 meaning the cookie lasts for the browser session.
UTMA_EXPIRY = 63072000
UTMB_EXPIRY = 1800
SESSION_EXPIRY = 0

cookie_expiries = (
    ('__utma', UTMA_EXPIRY),
    ('__utmb', UTMB_EXPIRY),
    ('__utmc', SESSION_EXPIRY),
    ('__utmz', SESSION_EXPIRY),
)


CookieValue = namedtuple('CookieValue', ['value', 'expiry_seconds'])


def cookie_values(p):
    """
    Collect the cookie values of a built parameter set, for the caller to
    persist.

    :param p:
        Parameters of a built request.
    :type p:
        utmtrack.parameters.ParameterHolder
    :returns:
        Mapping of cookie name to CookieValue.
    :rtype:
        dict
    """
    cookies = {}
    for name, expiry in cookie_expiries:
        value = p[name]
        if value:
            cookies[name] = CookieValue(str(value), expiry)
    return cookies


def apply_cookies(resp, cookies, domain=None, path='/'):
    """
    Set cookie values computed by a request on a response.

    :param resp:
        Response to set the cookies on.
    :type resp:
        webob.Response instance
    :param cookies:
        Mapping of cookie name to CookieValue.
    :type cookies:
        dict
    """
    for name, cookie in sorted(cookies.items()):
        resp.set_cookie(name, cookie.value,
                        max_age=cookie.expiry_seconds or None,
                        domain=domain, path=path)
