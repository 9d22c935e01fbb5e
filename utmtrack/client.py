import sys
import logging
import logging.config
import argparse

import simplejson as json

from .config import Config, error_severities
from .entities import Page, Event
from .errors import TrackingError
from .tracker import Tracker
from .transport.memory import MemoryTransport
from .visitor import Visitor, Session


log = logging.getLogger(__name__)


def logging_config(verbose=False, filename=None):
    handlers = {
        'console': {
            'class': 'logging.StreamHandler',
            'stream': sys.stderr,
            'formatter': 'generic',
            'level': logging.DEBUG if verbose else logging.WARN,
        },
        'null': {
            'class': 'logging.NullHandler',
        }
    }

    if filename:
        handlers['root_file'] = {
            'class': 'logging.FileHandler',
            'formatter': 'generic',
            'level': 'NOTSET',
            'filename': filename,
        }

    return {
        'version': 1,
        'formatters': {
            'generic': {
                'format':
                "%(asctime)s %(levelname)-5.5s [%(name)s] %(message)s"
            },
        },
        'handlers': handlers,
        'loggers': {
            'utmtrack': {
                'propagate': True,
                'level': 'NOTSET',
                'handlers': list(handlers.keys()),
            },
        },
        'root': {
            'level': 'DEBUG',
            'handlers': [],
        },
    }


def build_parser():
    p = argparse.ArgumentParser(
        description='Send a single tracking request from the command line.')

    p.add_argument('account_id', type=str,
                   help='Account ID, like UA-1234567-8')
    p.add_argument('domain_name', type=str,
                   help='Tracked host name, like www.example.com')
    p.add_argument('-v', '--verbose', dest='verbose', action='store_true',
                   default=False, help='Print detailed output')
    p.add_argument('--log', dest='error_log_path', type=str,
                   help='Path to error/debug log')
    p.add_argument('--page', type=str, default='/',
                   help='Page path of the pageview')
    p.add_argument('--title', type=str, help='Page title')
    p.add_argument('--event', nargs=2, metavar=('CATEGORY', 'ACTION'),
                   help='Send an event instead of a pageview')
    p.add_argument('--label', type=str, help='Event label')
    p.add_argument('--value', type=int, help='Event value')
    p.add_argument('--ip', type=str, help='Visitor IP address')
    p.add_argument('--user-agent', dest='user_agent', type=str,
                   help='Visitor user agent')
    p.add_argument('--locale', type=str, help='Visitor locale, like en-US')
    p.add_argument('--anonymize-ip', dest='anonymize_ip',
                   action='store_true', default=False,
                   help='Zero the last block of the visitor IP')
    p.add_argument('--severity', choices=error_severities, default='raise',
                   help='What to do with invalid input')
    p.add_argument('--timeout', type=float, default=1.0,
                   help='Seconds to wait for the collection endpoint')
    p.add_argument('--dry-run', dest='dry_run', action='store_true',
                   default=False,
                   help='Print the parameters as JSON instead of sending')
    return p


def main(args=None):
    args = build_parser().parse_args(args)

    logging.config.dictConfig(logging_config(args.verbose,
                                             args.error_log_path))

    config = Config(error_severity=args.severity,
                    anonymize_ip_addresses=args.anonymize_ip,
                    request_timeout=args.timeout)
    transport = MemoryTransport() if args.dry_run else None

    visitor = Visitor(ip_address=args.ip, user_agent=args.user_agent,
                      locale=args.locale)
    session = Session(start_time=visitor.current_visit_time)

    try:
        tracker = Tracker(args.account_id, args.domain_name, config=config,
                          transport=transport)
        if args.event:
            category, action = args.event
            event = Event(category, action, label=args.label,
                          value=args.value)
            request = tracker.track_event(event, session, visitor)
        else:
            page = Page(args.page, title=args.title)
            request = tracker.track_pageview(page, session, visitor)
    except TrackingError as e:
        log.error('%s: %s', e.__class__.__name__, e)
        return 1

    if args.dry_run:
        json.dump(request.parameters.to_dict(), sys.stdout, indent=2)
        sys.stdout.write('\n')
    return 0
