"""API Lambda handler for pet travel regulation lookups.

Routes:
- GET /regulations?origin={code}&destination={code}&pet_type={Dog|Cat}
- GET /countries?q={query}
- GET /defaults
- POST /reload
"""

import asyncio
import json
import os
import time
from typing import Any, Optional

from pet_travel_kb.core import (
    configure_logging,
    get_logger,
    bind_query_context,
    PetTravelKBError,
    ResolutionError,
)
from pet_travel_kb.lookup import RegulationLookupService
from pet_travel_kb.presentation import FormatterOptions
from pet_travel_kb.processing import TransformOptions, MergePolicy, IntegrityPolicy
from pet_travel_kb.retrieval import GvizTableSource, SourceConfig

configure_logging(level=os.environ.get("LOG_LEVEL", "INFO"), json_format=True)
logger = get_logger(__name__)

# Global service instance (initialized lazily)
_lookup_service: Optional[RegulationLookupService] = None


def _get_lookup_service() -> RegulationLookupService:
    """Get or create the lookup service."""
    global _lookup_service

    if _lookup_service is None:
        load_timeout = os.environ.get("LOAD_TIMEOUT_SECONDS")
        config = SourceConfig(
            spreadsheet_id=os.environ.get("SPREADSHEET_ID", ""),
            timeout_seconds=int(os.environ.get("FETCH_TIMEOUT_SECONDS", "30")),
            load_timeout_seconds=float(load_timeout) if load_timeout else None,
            concurrent_fetch=os.environ.get("CONCURRENT_FETCH", "false").lower() == "true",
        )
        transform_options = TransformOptions(
            merge_policy=MergePolicy(os.environ.get("MERGE_POLICY", "last_write_wins")),
            integrity_policy=IntegrityPolicy(os.environ.get("INTEGRITY_POLICY", "abort")),
        )
        formatter_options = FormatterOptions(
            high_complexity_marker=os.environ.get("HIGH_COMPLEXITY_MARKER", "高"),
        )
        _lookup_service = RegulationLookupService(
            GvizTableSource(config),
            transform_options=transform_options,
            formatter_options=formatter_options,
        )

    return _lookup_service


def _ensure_loaded(service: RegulationLookupService) -> None:
    """Load data on first use."""
    if not service.is_loaded:
        asyncio.run(service.load_data())


def _build_response(status_code: int, body: Any) -> dict:
    """Build an API Gateway response."""
    return {
        "statusCode": status_code,
        "headers": {
            "Content-Type": "application/json",
            "Access-Control-Allow-Origin": "*",
            "Access-Control-Allow-Methods": "GET,POST,OPTIONS",
        },
        "body": json.dumps(body, ensure_ascii=False) if not isinstance(body, str) else body,
    }


def _error_body(error: PetTravelKBError) -> dict:
    return {
        "error": error.message,
        "error_code": error.error_code,
        "details": error.details,
    }


def _handle_resolve(service: RegulationLookupService, params: dict) -> dict:
    origin = (params.get("origin") or "").strip()
    destination = (params.get("destination") or "").strip()
    pet_type = (params.get("pet_type") or "").strip()
    bind_query_context(origin=origin, destination=destination, pet_type=pet_type)

    resolved = service.resolve(origin, destination, pet_type)
    view = service.render(resolved)
    return _build_response(200, {
        "risk_level": resolved.risk_level.label,
        "risk_kind": resolved.risk_level.kind.value,
        "origin": {"code": resolved.origin_code, "name": resolved.origin_display_name},
        "destination": {"code": resolved.dest_code, "name": resolved.dest_display_name},
        "pet_type": resolved.pet_type.value,
        "complexity": resolved.complexity,
        "preparation_time": resolved.preparation_time,
        "regulation": resolved.regulation.model_dump(),
        "view": view.to_dict(),
        "html": view.to_html(),
    })


def handler(event: dict, context: Any) -> dict:
    """Handle regulation lookup API requests.

    Args:
        event: API Gateway event
        context: Lambda context

    Returns:
        API Gateway response
    """
    start_time = time.time()
    path = event.get("path", "")
    method = event.get("httpMethod", "GET")
    params = event.get("queryStringParameters") or {}
    logger.info("lookup_request_received", path=path, method=method)

    try:
        service = _get_lookup_service()

        if path.endswith("/reload") and method == "POST":
            index = asyncio.run(service.load_data())
            return _build_response(200, {
                "countries": len(index.countries),
                "rules": index.rule_count,
                "loaded_at": index.loaded_at.isoformat(),
            })

        _ensure_loaded(service)

        if path.endswith("/regulations"):
            return _handle_resolve(service, params)

        if path.endswith("/countries"):
            countries = service.search_countries(params.get("q"))
            return _build_response(200, {
                "countries": [c.model_dump() for c in countries],
                "total": len(countries),
            })

        if path.endswith("/defaults"):
            return _build_response(200, service.default_selection().model_dump(mode="json"))

        return _build_response(404, {"error": f"Unknown route: {method} {path}"})

    except ResolutionError as e:
        logger.info("lookup_query_rejected", error_code=e.error_code, error=e.message)
        return _build_response(400, _error_body(e))
    except PetTravelKBError as e:
        logger.error("lookup_data_unavailable", error_code=e.error_code, error=e.message)
        body = _error_body(e)
        body["error"] = "無法從試算表載入數據，請稍後再試。"
        body["reason"] = e.message
        return _build_response(503, body)
    except Exception as e:
        logger.error("lookup_request_failed", path=path, error=str(e))
        return _build_response(500, {
            "error": "Internal server error",
            "error_code": "INTERNAL",
        })
    finally:
        logger.info(
            "lookup_request_completed",
            path=path,
            duration_ms=int((time.time() - start_time) * 1000),
        )
