"""
Various utility functions used by utmtrack. It is not expected that these will
be used externally.
"""

import random
import calendar
from datetime import datetime
from urllib.parse import quote

import pytz


# Characters which JavaScript's encodeURIComponent() leaves untouched, besides
# letters, digits and "-_.".
uri_component_safe = "!~*'()"


def generate_hash(string):
    """
    Compute the hash used by the browser tracking script for domain names and
    visitor fingerprints. This must match ga.js bit for bit, including the
    28-bit truncation on every step. Like ``charCodeAt()``, it works on
    UTF-16 code units, so characters outside the BMP count as two.

    :param string:
        Input to hash, usually a domain name.
    :type string:
        string
    :returns:
        Hash value, 1 for an empty or missing input.
    :rtype:
        int
    """
    if not string:
        return 1

    data = str(string).encode('utf-16-le', 'surrogatepass')
    units = [data[i] | (data[i + 1] << 8) for i in range(0, len(data), 2)]

    h = 0
    for c in reversed(units):
        h = ((h << 6) & 0xfffffff) + c + (c << 14)
        left_most_7 = h & 0xfe00000
        if left_most_7 != 0:
            h ^= left_most_7 >> 21
    return h


def generate_32bit_random():
    """
    Return a random positive 32-bit signed integer, used for request ids,
    session ids and visitor ids.
    """
    return random.randint(0, 0x7fffffff)


def encode_uri_component(value):
    """
    Encode a value the way JavaScript's ``encodeURIComponent()`` does.

    :param value:
        Value to encode. Non-strings are converted with ``str()``.
    :returns:
        Percent-encoded string.
    :rtype:
        string
    """
    return quote(str(value), safe=uri_component_safe)


def anonymize_ip(ip):
    """
    Zero the last block of a dotted IP address, e.g. ``203.0.113.55`` becomes
    ``203.0.113.0``. Addresses without a dot are returned unchanged.
    """
    if not ip or '.' not in ip:
        return ip
    return ip.rsplit('.', 1)[0] + '.0'


def first_language(header):
    """
    Return the first language of an ``Accept-Language`` header, e.g.
    ``de-DE`` for ``de-DE,de;q=0.8,en;q=0.5``, or None if there is none.
    """
    if not header:
        return None
    lang = header.split(',', 1)[0].split(';', 1)[0].strip()
    return lang or None


def to_timestamp(dt):
    """
    Convert a datetime into integer POSIX seconds. Naive datetimes are
    assumed to be UTC.

    :param dt:
        Time to convert.
    :type dt:
        datetime.datetime
    :rtype:
        int
    """
    if dt.tzinfo is None:
        dt = pytz.utc.localize(dt)
    return calendar.timegm(dt.utctimetuple())


def from_timestamp(ts):
    """
    Convert POSIX seconds into a timezone-aware UTC datetime.

    :raises ValueError:
        If ``ts`` is not an integer or out of the platform's range.
    """
    try:
        return datetime.fromtimestamp(int(ts), pytz.utc)
    except (OverflowError, OSError) as e:
        raise ValueError('Timestamp %r is out of range: %s' % (ts, e))


def now():
    return datetime.now(pytz.utc)
