"""Port interfaces for the eventseal application layer.

Services depend on these protocols, never on concrete implementations.
"""

__all__ = ["SignerPort"]

from eventseal.app.ports.signer import SignerPort
