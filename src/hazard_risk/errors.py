"""Failures raised at the ingestion boundary."""

from __future__ import annotations


class IngestionError(Exception):
    """Base class for failures while fetching a hazard dataset."""


class TransportFailure(IngestionError):
    """Network error, timeout, or HTTP error status from a provider."""


class MalformedPayload(IngestionError):
    """Provider response did not have the expected shape."""
