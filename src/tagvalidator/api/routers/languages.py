"""Language listing and reference endpoints: GET /languages, GET /reference."""

from __future__ import annotations

from fastapi import APIRouter

from tagvalidator.api.schemas import LanguageInfo, LanguageListResponse, ReferenceResponse
from tagvalidator.markup_reference import MARKUP_REFERENCE
from tagvalidator.models.tokens import Language

router = APIRouter()


@router.get("/languages", response_model=LanguageListResponse)
async def list_languages() -> LanguageListResponse:
    """List supported languages and the tokenizer mode each one uses."""
    return LanguageListResponse(
        languages=[LanguageInfo(name=lang, mode=lang.tokenizer_mode) for lang in Language]
    )


@router.get("/reference", response_model=ReferenceResponse)
async def get_reference() -> ReferenceResponse:
    """Return the markup rules reference."""
    return ReferenceResponse(reference=MARKUP_REFERENCE)
