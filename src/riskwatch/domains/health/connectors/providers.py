"""Concrete PatientDataProvider implementations."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from riskwatch.domains.health.connectors.mock_data import get_mock_cohort


class MockPatientDataProvider:
    """Serves a generated mock cohort. Always available."""

    def __init__(
        self,
        cohort_size: int = 12,
        *,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self._cohort_size = cohort_size
        self._clock = clock

    async def get_patient_bundle(self, patient_id: str) -> dict[str, Any] | None:
        for bundle in get_mock_cohort(self._cohort_size, self._clock()):
            if bundle["profile"]["user_id"] == patient_id:
                return bundle
        return None

    async def get_population(self) -> list[dict[str, Any]]:
        return get_mock_cohort(self._cohort_size, self._clock())

    @property
    def data_source(self) -> str:
        return "mock"


class InMemoryPatientDataProvider:
    """Serves caller-supplied bundles keyed by patient id."""

    def __init__(self, bundles: dict[str, dict[str, Any]], source: str = "memory") -> None:
        self._bundles = dict(bundles)
        self._source = source

    async def get_patient_bundle(self, patient_id: str) -> dict[str, Any] | None:
        return self._bundles.get(patient_id)

    async def get_population(self) -> list[dict[str, Any]]:
        return [
            {**bundle, "patient_id": patient_id}
            for patient_id, bundle in self._bundles.items()
        ]

    @property
    def data_source(self) -> str:
        return self._source
