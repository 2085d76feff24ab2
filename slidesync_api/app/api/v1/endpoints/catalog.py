"""
Catalog endpoints for API v1.

Read-only lists of transitions, music, templates and export formats,
plus the streaming-music search and URL import of the music step.
These routes do not require authentication.
"""

from typing import List

from fastapi import APIRouter, HTTPException, Query, status

from slidesync_api.app.schemas.catalog import (
    Catalog,
    ExportFormat,
    MusicTrack,
    StreamingImport,
    StreamingImportResult,
    StreamingTrack,
    Template,
    TemplateCategory,
    Transition,
)
from slidesync_api.app.services.catalog_service import EXPORT_FORMATS, MUSIC_LIBRARY, TRANSITIONS, CatalogService

router = APIRouter()


@router.get("/", response_model=Catalog)
async def get_catalog() -> Catalog:
    """Everything the editor needs in one response."""
    return CatalogService.catalog()


@router.get("/transitions", response_model=List[Transition])
async def list_transitions() -> List[Transition]:
    return TRANSITIONS


@router.get("/music", response_model=List[MusicTrack])
async def list_music() -> List[MusicTrack]:
    return MUSIC_LIBRARY


@router.get("/export-formats", response_model=List[ExportFormat])
async def list_export_formats() -> List[ExportFormat]:
    return EXPORT_FORMATS


@router.get("/templates", response_model=List[Template])
async def search_templates(
    q: str = Query("", description="Matches template names and tags, case-insensitive"),
    category: str = Query("all"),
) -> List[Template]:
    return CatalogService.search_templates(q, category)


@router.get("/templates/categories", response_model=List[TemplateCategory])
async def template_categories() -> List[TemplateCategory]:
    return CatalogService.categories()


@router.get("/templates/{template_id}", response_model=Template)
async def get_template(template_id: str) -> Template:
    template = CatalogService.get_template(template_id)
    if template is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Template {template_id} not found")
    return template


@router.get("/streaming/search", response_model=List[StreamingTrack])
async def search_streaming(q: str = Query("")) -> List[StreamingTrack]:
    """Search streaming platforms for tracks (sample results)."""
    return CatalogService.search_streaming(q)


@router.post("/streaming/import", response_model=StreamingImportResult)
async def import_streaming(body: StreamingImport) -> StreamingImportResult:
    """Turn a Spotify, Audiomack or Apple Music URL into a music reference."""
    try:
        return StreamingImportResult(**CatalogService.import_streaming_track(body.url))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
