"""Pydantic configuration schema for CLI YAML input."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, ValidationError


class EvaluationConfig(BaseModel):
    timeout_seconds: float | None = Field(default=None, gt=0)
    max_pending_calls: int | None = Field(default=None, ge=1)
    notify_on_add: bool | None = None


class EvaluatorClientConfig(BaseModel):
    endpoint: str | None = None
    api_key: str | None = None
    timeout_seconds: float | None = Field(default=None, gt=0)


class LoggingConfig(BaseModel):
    level: str = "INFO"


class AppConfig(BaseModel):
    evaluation: EvaluationConfig = Field(default_factory=EvaluationConfig)
    evaluator: EvaluatorClientConfig = Field(default_factory=EvaluatorClientConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def to_settings(self) -> dict[str, Any]:
        settings: dict[str, Any] = {}
        evaluation_settings = self.evaluation.model_dump(exclude_none=True)
        if evaluation_settings:
            settings["evaluation"] = evaluation_settings
        evaluator_settings = self.evaluator.model_dump(exclude_none=True)
        if evaluator_settings:
            settings["evaluator"] = evaluator_settings
        return settings


def load_config(raw: Any) -> AppConfig:
    if not isinstance(raw, dict):
        raise ValidationError.from_exception_data(
            "AppConfig",
            [
                {
                    "type": "dict_type",
                    "loc": ("config",),
                    "input": raw,
                }
            ],
        )
    return AppConfig.model_validate(raw)
