"""Collector package for SpaceWx.

Fetches DONKI feeds (flares, geomagnetic storms, CMEs) for a trailing
window and decodes them into event models.

Submodules
----------
donki -- DonkiClient: concurrent three-feed fetch with all-or-nothing results.
"""

from spacewx.collector.donki import DonkiClient, FetchResult

__all__ = ["DonkiClient", "FetchResult"]
