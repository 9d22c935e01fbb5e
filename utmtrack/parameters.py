from urllib.parse import quote


class ParameterHolder(object):
    """
    The full parameter set of one outbound request. Every wire parameter is an
    attribute defaulting to None; unset parameters are not sent.
    """
    fields = (
        # General
        'utmwv', 'utmac', 'utmhn', 'utmt', 'utmn', 'utmip', 'aip', 'utmhid',
        'utms',
        # Visitor
        'utmul', 'utmfl', 'utmje', 'utmsc', 'utmsr',
        # Extensible parameters (custom variables, events, site speed)
        'utme',
        # Page
        'utmp', 'utmdt', 'utmcs', 'utmr',
        # Events
        'utmni',
        # Social
        'utmsn', 'utmsa', 'utmsid',
        # Transactions
        'utmtid', 'utmtst', 'utmtto', 'utmttx', 'utmtsp', 'utmtci', 'utmtrg',
        'utmtco',
        # Items
        'utmipc', 'utmipn', 'utmiva', 'utmipr', 'utmiqt',
        # Cookies
        '__utma', '__utmb', '__utmc', '__utmz', 'utmcc',
    )

    def __init__(self, **kwargs):
        for field in self.fields:
            setattr(self, field, kwargs.get(field))

    def __getitem__(self, name):
        if name not in self.fields:
            raise KeyError(name)
        return getattr(self, name)

    def __setitem__(self, name, value):
        # Item access for the cookie parameters, whose leading double
        # underscore would be name-mangled as attributes inside a class body.
        if name not in self.fields:
            raise KeyError(name)
        setattr(self, name, value)

    def items(self):
        for field in self.fields:
            value = getattr(self, field)
            if value is not None:
                yield field, value

    def to_dict(self):
        return dict(self.items())

    def to_query_string(self):
        """
        Render the set parameters as a query string. Spaces are encoded as
        ``%20`` rather than ``+``, like the browser script does.
        """
        return '&'.join('%s=%s' % (quote(name, safe=''),
                                   quote(str(value), safe=''))
                        for name, value in self.items())
