"""
Anchor embedding precomputation.

Each category's label texts are embedded in a single call, so vector i of
the response belongs to label i of the taxonomy. The five category calls run
concurrently and are joined; any failure aborts the whole precompute because
a partial anchor set cannot label anything.
"""

import asyncio
from dataclasses import dataclass
from typing import Iterator

import structlog

from feedback_insights.embeddings.exceptions import AnchorPrecomputationError
from feedback_insights.embeddings.vector_math import as_vector
from feedback_insights.llm.base_client import BaseLLMClient
from feedback_insights.models.enums import Category
from feedback_insights.monitoring.metrics import embedding_requests_total
from feedback_insights.taxonomy.loader import CategoryTaxonomy, LabelTaxonomy, first_token


logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Anchor:
    """One label text with its embedding."""

    text: str
    vector: tuple[float, ...]

    @property
    def label(self) -> str:
        return first_token(self.text)


@dataclass(frozen=True)
class CategoryAnchorSet:
    """
    Anchors of one category in taxonomy enumeration order.

    Order matters: when two anchors score equally the earlier one wins.
    """

    category: Category
    anchors: tuple[Anchor, ...]

    def __iter__(self) -> Iterator[Anchor]:
        return iter(self.anchors)

    def __len__(self) -> int:
        return len(self.anchors)


@dataclass(frozen=True)
class AnchorSets:
    """Anchor sets for all five categories, built once per job."""

    version: str
    sets: tuple[CategoryAnchorSet, ...]

    def __getitem__(self, category: Category) -> CategoryAnchorSet:
        for anchor_set in self.sets:
            if anchor_set.category == category:
                return anchor_set
        raise KeyError(category)

    def __iter__(self) -> Iterator[CategoryAnchorSet]:
        return iter(self.sets)


class AnchorStore:
    """
    Builds AnchorSets from a taxonomy using the embedding service.
    """

    def __init__(
        self,
        llm_client: BaseLLMClient,
        taxonomy: LabelTaxonomy,
        embedding_model: str,
        dimensions: int,
    ):
        self.llm_client = llm_client
        self.taxonomy = taxonomy
        self.embedding_model = embedding_model
        self.dimensions = dimensions

    async def _embed_category(self, entry: CategoryTaxonomy) -> CategoryAnchorSet:
        try:
            raw_vectors = await self.llm_client.embed(list(entry.labels), self.embedding_model)
        except Exception:
            embedding_requests_total.labels(purpose="anchors", success="false").inc()
            raise
        embedding_requests_total.labels(purpose="anchors", success="true").inc()

        if len(raw_vectors) != len(entry.labels):
            raise AnchorPrecomputationError(
                f"Anchor count mismatch for '{entry.category.value}'",
                details={"expected": len(entry.labels), "received": len(raw_vectors)},
            )

        anchors = []
        for text, raw in zip(entry.labels, raw_vectors):
            vector = as_vector(raw, self.dimensions)
            if vector is None:
                raise AnchorPrecomputationError(
                    f"Malformed anchor vector for label '{text}'",
                    details={"category": entry.category.value, "expected_dimensions": self.dimensions},
                )
            anchors.append(Anchor(text=text, vector=tuple(vector)))

        return CategoryAnchorSet(category=entry.category, anchors=tuple(anchors))

    async def precompute(self) -> AnchorSets:
        """
        Embed every category's labels.

        Returns:
            AnchorSets in taxonomy order

        Raises:
            AnchorPrecomputationError: If any category failed
        """
        entries = list(self.taxonomy)
        results = await asyncio.gather(
            *(self._embed_category(entry) for entry in entries),
            return_exceptions=True,
        )

        failures = {
            entry.category.value: f"{type(result).__name__}: {result}"
            for entry, result in zip(entries, results)
            if isinstance(result, BaseException)
        }
        if failures:
            logger.error("Anchor precomputation failed", failures=failures)
            raise AnchorPrecomputationError(
                f"Anchor embedding failed for {len(failures)} categor{'y' if len(failures) == 1 else 'ies'}",
                details={"failures": failures},
            )

        anchor_sets = AnchorSets(version=self.taxonomy.version, sets=tuple(results))
        logger.info(
            "Anchor embeddings computed",
            taxonomy_version=self.taxonomy.version,
            categories=len(anchor_sets.sets),
            anchors=sum(len(s) for s in anchor_sets),
        )
        return anchor_sets
