"""
Community data model and act-log loaders.

- ``Call``/``Reply`` acts and ``Actor`` value types
- ``CommunityBuilder`` (mutable) and the frozen ``Community`` it produces
- ``import_lax`` and ``load_acts`` input readers
"""

from .model import (
    Act,
    ACT_TYPES,
    Actor,
    Call,
    Community,
    CommunityBuilder,
    Reply,
)
from .io import import_lax, load_acts
