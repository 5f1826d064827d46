"""
Tickets Interfaces Layer
========================

FastAPI controllers for tickets and comments.
"""

from helpdesk.tickets.interfaces.controllers import tickets_router

__all__ = ["tickets_router"]
