"""Patient data connectors — abstraction over the record-fetch layer."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class PatientDataProvider(Protocol):
    """Abstract interface for fetching raw patient bundles.

    Tools call these methods without knowing whether rows come from the
    clinical database, a FHIR adapter or the mock cohort. Bundles are raw
    ``{"profile", "vitals", "checkIns"}`` mappings, lists most recent first.
    """

    async def get_patient_bundle(self, patient_id: str) -> dict[str, Any] | None:
        """One patient's bundle, or None when the patient is unknown."""
        ...

    async def get_population(self) -> list[dict[str, Any]]:
        """Bundles for every patient in the caller's cohort."""
        ...

    @property
    def data_source(self) -> str:
        """Label for the active data source, e.g. 'mock'."""
        ...
