"""
Tickets Module
==============

Bounded Context for the ticket lifecycle.

Responsibilities:
- Create tickets with SLA commitments computed from the organization's rules
- Enforce the status state machine on every update
- Record comments and stamp the first agent response on the SLA timer
"""
