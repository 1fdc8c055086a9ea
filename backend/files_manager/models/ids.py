"""Record identifiers.

Ids are 32 hex chars: a nanosecond timestamp, a per-process counter and
random bytes. Sorting by id therefore follows insertion order, which is
what paginated listings and the job queue rely on.
"""

import itertools
import secrets
import time

_counter = itertools.count()


def new_id() -> str:
    return f"{time.time_ns():016x}{next(_counter) & 0xFFFF:04x}{secrets.token_hex(6)}"
