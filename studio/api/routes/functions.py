"""
In-process implementation of the generate-content function, for deployments that
do not run it as a separate edge function. Same JSON contract as the remote one.
"""
import hmac
import logging
from typing import Optional
from fastapi import APIRouter, Header, HTTPException, status
from studio.schemas.content import GenerationRequest, GenerationFunctionResponse
from studio.services.generation_client import get_function_key
from studio.services.template_engine import generate_variants

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/generate-content", response_model=GenerationFunctionResponse)
def generate_content_function(
    request: GenerationRequest,
    authorization: Optional[str] = Header(None)
):
    expected_key = get_function_key()
    if expected_key:
        supplied = (authorization or "").replace("Bearer ", "", 1).strip()
        if not hmac.compare_digest(supplied.encode(), expected_key.encode()):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid function key"
            )

    try:
        variants = generate_variants(request)
    except Exception as e:
        logger.exception("Template engine failed: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate content"
        )
    return {"content": variants}
