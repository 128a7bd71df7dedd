"""Exceptions raised by KnowledgeScout."""

from __future__ import annotations


class KnowledgeScoutError(Exception):
    """Base class for all KnowledgeScout errors."""


class ValidationError(KnowledgeScoutError):
    """Invalid input rejected before any work is done."""


class StorageError(KnowledgeScoutError):
    """The chunk store could not be read or written."""
