"""
SLA Module
==========

Bounded Context for Service Level Agreement management.

Responsibilities:
- Store one SLA rule per (organization, priority)
- Calculate response/resolution deadlines at ticket creation
- Detect breaches reactively and in the periodic monitoring sweep
- Run the sweep on a fixed interval via APScheduler
"""
