"""eventseal - tamper-evident signing for audit trails and ingestion receipts.

Signs security-event audit records and ingestion batch receipts with
HMAC-SHA256 so verifiers can detect altered fields, timestamps, or origins.
"""

__version__ = "0.1.0"
__author__ = "eventseal Contributors"

from eventseal.audit.signer import EventSigner
from eventseal.audit.timestamps import EventTimestamp
from eventseal.config import Settings, get_settings

__all__ = ["EventSigner", "EventTimestamp", "Settings", "get_settings", "__version__"]
