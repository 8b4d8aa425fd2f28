"""HTTP routes for the Flask API."""

import logging
from datetime import date
from http import HTTPStatus
from typing import Any, Dict

from flask import Blueprint, jsonify, request
from pydantic import ValidationError

from backend.core.gaps import compute_gaps
from backend.core.ping import get_ping_message, get_regulation_years
from backend.core.timeline import project_timeline
from backend.domain.regs import RegistryError
from backend.models import GapsRequest, TimelineRequest
from backend.schemas.ping import PingResponse

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__)


@api_bp.errorhandler(ValidationError)
def _handle_validation_error(exc: ValidationError):
    """Convert Pydantic validation errors into JSON responses."""
    logger.warning("Rejected %s payload: %s error(s)", request.path, exc.error_count())
    return jsonify({"detail": exc.errors(include_url=False, include_context=False)}), HTTPStatus.BAD_REQUEST


@api_bp.errorhandler(RegistryError)
def _handle_registry_error(exc: RegistryError):
    logger.error("Regulatory data unavailable: %s", exc)
    return jsonify({"detail": "regulatory data unavailable"}), HTTPStatus.INTERNAL_SERVER_ERROR


def _reference_date(payload: GapsRequest) -> date:
    return payload.referenceDate or date.today()


@api_bp.get("/ping")
def ping() -> Any:
    """Health-check endpoint."""
    response = PingResponse(message=get_ping_message(), regulationYears=get_regulation_years())
    return jsonify(response.model_dump())


@api_bp.post("/gaps")
def gaps() -> Any:
    """Coverage gaps for disability, death and retirement."""
    raw_payload: Dict[str, Any] = request.get_json(force=True, silent=False)
    payload = GapsRequest.model_validate(raw_payload)
    result = compute_gaps(payload, _reference_date(payload))
    return jsonify(result.model_dump(by_alias=True))


@api_bp.post("/timeline")
def timeline() -> Any:
    """Monthly coverage series with presentation markers."""
    raw_payload: Dict[str, Any] = request.get_json(force=True, silent=False)
    payload = TimelineRequest.model_validate(raw_payload)
    result = project_timeline(payload, _reference_date(payload)).result()
    return jsonify(result.model_dump())
