"""navrelay: geospatially-aware publish/subscribe relay for S-100 maritime data.

Producers publish navigational aids (S-125), navigation warnings (S-124)
and administrative AtoN records (S-201), each tagged with an identifier and
a geometry.  The relay fans every envelope out to:
  - a live push channel for connected viewers, and
  - a spatially-indexed feature store with one schema per domain,
and applies identifier-filtered deletions to the store.
"""

__version__ = "0.1.0"
__description__ = "Geospatial publish/subscribe relay for S-100 maritime data"

from navrelay.core.relay import Relay
from navrelay.models.domains import PublicationDomain
from navrelay.models.envelopes import Envelope

__all__ = ["Envelope", "PublicationDomain", "Relay", "__version__"]
