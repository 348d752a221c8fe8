"""
Template Mode Routes.

HTTP boundary for the harmony checker and the token merger.

Key behaviors:
- Malformed bodies are rejected with 400 and an error message
- Harmony requires at least two references that are all ready
- Merge failures return 400 with every validation error listed
"""

from __future__ import annotations

import json
import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from src.api.deps import get_rules
from src.api.schemas import HarmonyRequest, HarmonyResponse, MergeRequest, MergeResponse
from src.components import harmony, token_merger
from src.components.harmony import HarmonyCheckInput, can_calculate_harmony
from src.components.token_merger import MergeTokensInput, TokenMergeError
from src.rules.models import TemplateRules

logger = logging.getLogger(__name__)

router = APIRouter()

RulesDep = Annotated[TemplateRules | None, Depends(get_rules)]


def _bad_request(error: str, **extra: Any) -> JSONResponse:
    return JSONResponse(status_code=400, content={"success": False, "error": error, **extra})


def _describe(e: ValidationError) -> str:
    first = e.errors()[0]
    location = ".".join(str(part) for part in first["loc"])
    return f"{location}: {first['msg']}" if location else first["msg"]


async def _read_body(request: Request) -> dict[str, Any] | JSONResponse:
    try:
        body = await request.json()
    except json.JSONDecodeError:
        return _bad_request("Request body must be valid JSON")
    if not isinstance(body, dict):
        return _bad_request("Request body must be a JSON object")
    return body


def _check_references(body: dict[str, Any], minimum: int) -> JSONResponse | None:
    references = body.get("references")
    if references is None:
        return _bad_request("Missing required field: references")
    if not isinstance(references, list):
        return _bad_request("Invalid references: must be an array")
    if len(references) < minimum:
        return _bad_request(f"Invalid references: must provide at least {minimum} references")
    return None


@router.post("/harmony", response_model=HarmonyResponse)
async def check_harmony(request: Request, rules: RulesDep) -> Any:
    """Calculate the harmony score for the given references."""
    body = await _read_body(request)
    if isinstance(body, JSONResponse):
        return body

    problem = _check_references(body, minimum=2)
    if problem is not None:
        return problem

    try:
        payload = HarmonyRequest.model_validate(body)
    except ValidationError as e:
        return _bad_request(f"Invalid harmony request: {_describe(e)}")

    if not can_calculate_harmony(payload.references):
        return _bad_request(
            "References not ready for harmony analysis",
            details='Ensure all references have status "ready" with complete token data',
            score=0,
        )

    try:
        result = harmony.run(
            HarmonyCheckInput(
                references=payload.references,
                section_mapping=payload.section_mapping,
                options=payload.options.to_options() if payload.options else None,
            ),
            rules=rules.harmony if rules else None,
        )
    except Exception as e:
        logger.exception("Error calculating harmony")
        return JSONResponse(status_code=500, content={"success": False, "error": str(e)})

    return HarmonyResponse(result=result.to_dict())


@router.post("/merge", response_model=MergeResponse)
async def merge_template_tokens(request: Request, rules: RulesDep) -> Any:
    """Merge the references' tokens according to the strategy."""
    body = await _read_body(request)
    if isinstance(body, JSONResponse):
        return body

    problem = _check_references(body, minimum=1)
    if problem is not None:
        return problem

    try:
        payload = MergeRequest.model_validate(body)
    except ValidationError as e:
        return _bad_request(f"Invalid merge request: {_describe(e)}")

    try:
        result = token_merger.run(
            MergeTokensInput(references=payload.references, strategy=payload.strategy),
            options=payload.options.to_options() if payload.options else None,
            rules=rules.merger if rules else None,
        )
    except TokenMergeError as e:
        return _bad_request(str(e), details=e.errors)
    except Exception as e:
        logger.exception("Error merging tokens")
        return JSONResponse(status_code=500, content={"success": False, "error": str(e)})

    return MergeResponse(result=result.to_dict())
