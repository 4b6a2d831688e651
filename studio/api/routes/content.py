"""
API endpoints for generating posts and managing the saved content library.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List, Optional
from studio.db.session import get_db
from studio.dependencies.auth import get_current_profile_id
from studio.schemas.content import (
    GenerationRequest,
    GenerateResponse,
    SaveContentRequest,
    SavedContentResponse,
)
from studio.services import generation_gate, content_store
from studio.services.generation_client import get_generation_engine

router = APIRouter()


@router.post("/generate", response_model=GenerateResponse)
def generate_content(
    request: GenerationRequest,
    db: Session = Depends(get_db),
    profile_id: str = Depends(get_current_profile_id),
    engine=Depends(get_generation_engine)
):
    """
    Generate post variants for the brief. Costs 1 token, charged only after the
    generator answered successfully.
    """
    variants, balance = generation_gate.generate(db, profile_id, request, engine)
    return {"content": variants, "tokens": balance}


@router.post("/saved", response_model=SavedContentResponse, status_code=status.HTTP_201_CREATED)
def save_content(
    content_data: SaveContentRequest,
    db: Session = Depends(get_db),
    profile_id: str = Depends(get_current_profile_id)
):
    return content_store.save_content(
        db,
        profile_id,
        content=content_data.content,
        content_type=content_data.content_type,
        platform=content_data.platform,
        title=content_data.title,
        business_name=content_data.business_name
    )


@router.get("/saved", response_model=List[SavedContentResponse])
def list_saved_content(
    platform: Optional[str] = None,
    db: Session = Depends(get_db),
    profile_id: str = Depends(get_current_profile_id)
):
    """Saved posts for the current user, newest first. Optionally filter by platform."""
    return content_store.list_content(db, profile_id, platform=platform)


@router.get("/saved/{item_id}", response_model=SavedContentResponse)
def get_saved_content(
    item_id: str,
    db: Session = Depends(get_db),
    profile_id: str = Depends(get_current_profile_id)
):
    return content_store.get_content(db, profile_id, item_id)


@router.delete("/saved/{item_id}")
def delete_saved_content(
    item_id: str,
    db: Session = Depends(get_db),
    profile_id: str = Depends(get_current_profile_id)
):
    """Delete a saved post (only if it belongs to the current user)."""
    content_store.delete_content(db, profile_id, item_id)
    return {"status": "success", "message": "Content deleted successfully"}
