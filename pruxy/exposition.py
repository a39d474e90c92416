"""Render collected samples in the Prometheus exposition formats."""

from __future__ import annotations

from typing import Iterable, Iterator, Optional, Sequence

from prometheus_client import CollectorRegistry
from prometheus_client.core import GaugeMetricFamily
from prometheus_client.exposition import choose_encoder

from .core import Sample


class SampleCollector:
    """Expose one cycle's samples to a ``prometheus_client`` registry."""

    def __init__(self, samples: Sequence[Sample]) -> None:
        self._samples = list(samples)

    def describe(self) -> list:
        return []

    def collect(self) -> Iterator[GaugeMetricFamily]:
        families: dict[str, tuple[GaugeMetricFamily, list[str]]] = {}
        for sample in self._samples:
            entry = families.get(sample.name)
            if entry is None:
                label_names = list(sample.labels)
                family = GaugeMetricFamily(
                    sample.name,
                    sample.documentation or sample.name,
                    labels=label_names,
                )
                entry = families[sample.name] = (family, label_names)
            family, label_names = entry
            family.add_metric(
                [sample.labels[name] for name in label_names], sample.value
            )
        for family, _ in families.values():
            yield family


def build_registry(samples: Iterable[Sample]) -> CollectorRegistry:
    """Build a throwaway registry holding exactly one collection cycle."""

    registry = CollectorRegistry(auto_describe=False)
    registry.register(SampleCollector(list(samples)))
    return registry


def render(
    samples: Iterable[Sample], accept_header: Optional[str] = None
) -> tuple[bytes, str]:
    """Encode samples, negotiating OpenMetrics when the scraper asks for it.

    Returns:
        The encoded body and its content type.
    """

    encoder, content_type = choose_encoder(accept_header or "")
    return encoder(build_registry(samples)), content_type
