"""
Helpdesk SLA Service
====================

Multi-tenant helpdesk backend centred on SLA timer management.

Modules:
- SLA: rule store, timer calculation, breach detection, monitoring sweep
- Tickets: ticket lifecycle, status state machine, comments
"""

__version__ = "1.0.0"
