class TrackingError(Exception):
    pass


class ValidationError(TrackingError):
    """
    Raised when an entity or tracker setting would produce an invalid request,
    e.g. a malformed account ID or an event without a category.
    """
    pass


class QuotaAdvisory(TrackingError):
    """
    The session has gone past the number of requests the collection endpoint
    guarantees to process. Requests are still sent unless the configuration
    asks for the limit to be enforced.
    """
    pass


class TransportError(TrackingError):
    pass
