"""Concurrency — in-flight ticket table deduplicating concurrent misses."""

from kevimage.concurrency.tickets import Ticket, TicketTable

__all__ = ["Ticket", "TicketTable"]
