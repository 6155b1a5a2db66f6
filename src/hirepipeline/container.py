"""Dependency injection container for the hiring pipeline."""

from __future__ import annotations

from pathlib import Path

from dependency_injector import containers, providers

from .core import (
    AuditLogger,
    AutoEvaluationTrigger,
    CandidateStore,
    EvaluationCollaborator,
    EvaluationTriggerConfig,
    OfferWorkflowController,
    OnboardingTracker,
    StageController,
)
from .llm import HTTPEvaluationClient
from .pipeline import PipelineRunner


class PipelineContainer(containers.DeclarativeContainer):
    """Dependency-injector container definition."""

    config = providers.Configuration()

    store = providers.Singleton(CandidateStore)

    audit_logger = providers.Object(None)

    evaluator = providers.Singleton(
        HTTPEvaluationClient,
        endpoint=config.evaluator.endpoint,
        api_key=config.evaluator.api_key,
        timeout=config.evaluator.timeout_seconds,
    )

    trigger_config = providers.Singleton(EvaluationTriggerConfig)

    trigger = providers.Singleton(
        AutoEvaluationTrigger,
        store=store,
        evaluator=evaluator,
        config=trigger_config,
    )

    offers = providers.Factory(OfferWorkflowController, store=store, audit_logger=audit_logger)
    stages = providers.Factory(StageController, store=store, audit_logger=audit_logger)
    onboarding = providers.Factory(OnboardingTracker, store=store, audit_logger=audit_logger)

    runner = providers.Factory(PipelineRunner, store=store, trigger=trigger)


def create_container(
    *,
    settings: dict | None = None,
    evaluator: EvaluationCollaborator | None = None,
    audit_path: Path | None = None,
) -> PipelineContainer:
    """Instantiate container with optional overrides."""

    container = PipelineContainer()
    container.config.from_dict({"evaluator": {"endpoint": None, "api_key": None, "timeout_seconds": None}})

    if evaluator is not None:
        container.evaluator.override(providers.Object(evaluator))

    if audit_path is not None:
        container.audit_logger.override(providers.Singleton(AuditLogger, audit_path))

    if not settings:
        return container

    evaluation_settings = settings.get("evaluation", {}) if isinstance(settings, dict) else {}
    if evaluation_settings:
        trigger_config = EvaluationTriggerConfig(**evaluation_settings)
        container.trigger_config.override(providers.Object(trigger_config))

    evaluator_settings = settings.get("evaluator", {}) if isinstance(settings, dict) else {}
    if evaluator_settings:
        container.config.evaluator.from_dict(evaluator_settings)

    return container
