"""Shared Kernel module.

This module contains foundational components that are explicitly shared across
the membership and reclamation bounded contexts: group and user identifiers,
the group lifecycle event, per-key locking and the job-queue contract.
Changes to this module affect both contexts and should be carefully coordinated.

Following Domain-Driven Design principles, the Shared Kernel is a small,
carefully managed set of components that contexts agree to depend on.
"""
