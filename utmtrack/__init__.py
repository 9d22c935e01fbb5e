from .config import Config
from .entities import (CustomVariable, Campaign, Page, Event, Item,
                       Transaction, SocialInteraction)
from .errors import (TrackingError, ValidationError, QuotaAdvisory,
                     TransportError)
from .tracker import Tracker
from .visitor import Visitor, Session
