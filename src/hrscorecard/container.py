"""Dependency injection container for the scorecard engine."""

from __future__ import annotations

from pathlib import Path

from dependency_injector import containers, providers

from .api import ScorecardApi
from .core import (
    AggregatorConfig,
    AnswerResolver,
    CandidateAggregator,
    CandidateRanker,
    GraderConfig,
    RankerConfig,
    ScaleNormalizer,
    SubmissionGrader,
)
from .service import ScorecardService
from .store import JsonScorecardStore, ScorecardStore


def _load_store(path: str | None) -> JsonScorecardStore:
    if not path:
        return JsonScorecardStore()
    return JsonScorecardStore.from_path(Path(path))


class ScorecardContainer(containers.DeclarativeContainer):
    """Dependency-injector container definition."""

    config = providers.Configuration()

    store = providers.Singleton(_load_store, path=config.store.path)

    normalizer = providers.Singleton(ScaleNormalizer)
    aggregator = providers.Singleton(CandidateAggregator, normalizer=normalizer)
    ranker = providers.Singleton(CandidateRanker)

    grader_config = providers.Singleton(GraderConfig)
    resolver = providers.Singleton(
        AnswerResolver,
        max_contribution=grader_config.provided.max_contribution,
    )
    grader = providers.Singleton(SubmissionGrader, resolver=resolver, config=grader_config)

    audit_logger = providers.Object(None)

    service = providers.Factory(
        ScorecardService,
        store=store,
        aggregator=aggregator,
        ranker=ranker,
        grader=grader,
        audit_logger=audit_logger,
    )

    summary_client = providers.Object(None)

    api = providers.Factory(ScorecardApi, service=service, summary_client=summary_client)


def create_container(
    *,
    settings: dict | None = None,
    store: ScorecardStore | None = None,
) -> ScorecardContainer:
    """Instantiate container with optional overrides."""

    container = ScorecardContainer()

    if store is not None:
        container.store.override(providers.Object(store))

    if not settings:
        return container

    store_settings = settings.get("store", {}) if isinstance(settings, dict) else {}
    if store_settings:
        container.config.from_dict({"store": store_settings})

    if "aggregator" in settings:
        aggregator_config = AggregatorConfig(**settings["aggregator"])
        container.aggregator.override(
            providers.Singleton(
                CandidateAggregator,
                normalizer=container.normalizer,
                config=aggregator_config,
            )
        )

    if "ranker" in settings:
        ranker_config = RankerConfig(**settings["ranker"])
        container.ranker.override(providers.Singleton(CandidateRanker, config=ranker_config))

    if "grader" in settings:
        container.grader_config.override(
            providers.Singleton(GraderConfig, **settings["grader"])
        )

    return container
