"""
This module contains utmtrack transport classes.

A transport class should implement at least the following method, where
``query_string`` is the rendered parameter set of one request and ``headers``
a dict of request metadata (``User-Agent``, ``X-Forwarded-For``). It returns
on success and raises utmtrack.errors.TransportError on failure.

    def send(self, query_string, headers):
        pass

"""
