"""Event listing providers.

TicketmasterEventSource queries the Ticketmaster Discovery API by radius
and keyword and normalizes partial records into Event models.
"""

from src.providers.event.ticketmaster_provider import TicketmasterEventSource

__all__ = ["TicketmasterEventSource"]
