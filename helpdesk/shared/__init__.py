"""
Shared Kernel Module
====================

This module contains shared infrastructure used across all bounded contexts
(SLA and Tickets).

Architecture Pattern: Modular Monolith
- Each module (sla, tickets) is a bounded context
- Shared kernel contains only generic infrastructure

DO NOT add business logic from SLA or Tickets to shared kernel.
"""
