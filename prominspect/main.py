from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.responses import RedirectResponse

from .config import Settings, load_metric_registry, settings as default_settings
from .logging_config import setup_logging
from .metrics.base import MetricType, QueryProvider
from .metrics.registry import MetricRegistry
from .services.collector import ReportCollector
from .services.status import DailyStatusMatrix

MAX_STATUS_DAYS = 31


def _metric_type_payload(metric_type: MetricType) -> Dict[str, Any]:
    return {
        "type": metric_type.type,
        "metrics": [
            dict(asdict(metric), labels=dict(metric.labels)) for metric in metric_type.metrics
        ],
    }


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_registry(request: Request) -> MetricRegistry:
    return request.app.state.registry


def get_collector(request: Request) -> ReportCollector:
    return request.app.state.collector


def get_status_matrix(request: Request) -> DailyStatusMatrix:
    return request.app.state.status_matrix


def create_app(
    provider: QueryProvider,
    registry: Optional[MetricRegistry] = None,
    app_settings: Optional[Settings] = None,
) -> FastAPI:
    """Build the service around an injected query provider.

    When no registry is given the metric definitions are loaded from
    ``Settings.metrics_config_path``.
    """
    app_settings = app_settings or default_settings
    setup_logging(app_settings.log_level)
    if registry is None:
        registry = load_metric_registry(
            app_settings.metrics_config_path, project_name=app_settings.project_name
        )

    app = FastAPI(title=app_settings.app_name)
    app.state.settings = app_settings
    app.state.registry = registry
    app.state.collector = ReportCollector(registry=registry, provider=provider)
    app.state.status_matrix = DailyStatusMatrix(provider=provider)

    @app.get("/", include_in_schema=False)
    async def root_redirect() -> RedirectResponse:
        return RedirectResponse("/api/report")

    @app.get("/api/metrics")
    def read_metrics(
        registry: MetricRegistry = Depends(get_registry),
    ) -> List[Dict[str, Any]]:
        return [_metric_type_payload(metric_type) for metric_type in registry.all()]

    @app.get("/api/metrics/{type_name}")
    def read_metric_type(
        type_name: str,
        registry: MetricRegistry = Depends(get_registry),
    ) -> Dict[str, Any]:
        try:
            metric_type = registry.get(type_name)
        except KeyError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return _metric_type_payload(metric_type)

    @app.get("/api/report")
    def read_report(collector: ReportCollector = Depends(get_collector)) -> Dict[str, Any]:
        return collector.collect().to_dict()

    @app.get("/api/status")
    def read_status(
        days: Optional[int] = Query(None, ge=1, le=MAX_STATUS_DAYS),
        registry: MetricRegistry = Depends(get_registry),
        matrix: DailyStatusMatrix = Depends(get_status_matrix),
        current: Settings = Depends(get_settings),
    ) -> Dict[str, Any]:
        window = days or min(current.status_days, MAX_STATUS_DAYS)
        return matrix.collect(registry, days=window).to_dict()

    return app
