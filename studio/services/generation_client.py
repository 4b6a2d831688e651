"""
Client for the generate-content function.

The function takes a GenerationRequest as JSON and answers
{"content": [{id, content, quality_score, engagement_prediction, keywords}, ...]}.
Any transport error, timeout, non-2xx status or malformed body is reported as
GenerationUnavailable; retrying is left to the user.
"""
import logging
import os
from typing import List, Optional
import requests
from pydantic import ValidationError
from studio.core.errors import GenerationUnavailable
from studio.schemas.content import GenerationRequest, GeneratedVariant, GenerationFunctionResponse
from studio.services.template_engine import generate_variants

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 15.0
MIN_VARIANTS = 2
MAX_VARIANTS = 3


def get_function_url() -> Optional[str]:
    """
    Explicit GENERATION_FUNCTION_URL wins, then the Supabase edge function URL.
    Returns None when neither is configured (the in-process engine is used).
    """
    url = os.getenv("GENERATION_FUNCTION_URL")
    if url:
        return url.rstrip("/")
    supabase_url = os.getenv("SUPABASE_URL")
    if supabase_url:
        return f"{supabase_url.rstrip('/')}/functions/v1/generate-content"
    return None


def get_function_key() -> str:
    return os.getenv("GENERATION_FUNCTION_KEY") or os.getenv("SUPABASE_ANON_KEY", "")


class GenerationClient:
    def __init__(self, url: str, api_key: str, timeout: float = DEFAULT_TIMEOUT_SECONDS, session: Optional[requests.Session] = None):
        self.url = url
        self.api_key = api_key
        self.timeout = timeout
        self.session = session  # None: module-level requests.post

    def generate(self, request: GenerationRequest) -> List[GeneratedVariant]:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        try:
            post = self.session.post if self.session else requests.post
            response = post(
                self.url,
                json=request.model_dump(),
                headers=headers,
                timeout=self.timeout
            )
        except requests.exceptions.Timeout as e:
            logger.warning("Generation function timed out after %ss: %s", self.timeout, e)
            raise GenerationUnavailable() from e
        except requests.exceptions.RequestException as e:
            logger.warning("Generation function request failed: %s", e)
            raise GenerationUnavailable() from e

        if not 200 <= response.status_code < 300:
            logger.warning("Generation function returned %s: %s", response.status_code, response.text[:200])
            raise GenerationUnavailable()

        try:
            body = GenerationFunctionResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.warning("Generation function returned a malformed body: %s", e)
            raise GenerationUnavailable() from e

        variants = body.content
        if not MIN_VARIANTS <= len(variants) <= MAX_VARIANTS:
            logger.warning("Generation function returned %s variants, expected %s-%s", len(variants), MIN_VARIANTS, MAX_VARIANTS)
            raise GenerationUnavailable()
        return variants


class LocalTemplateEngine:
    """Runs the template engine in-process, for deployments without a separate function."""

    def generate(self, request: GenerationRequest) -> List[GeneratedVariant]:
        return generate_variants(request)


def get_generation_engine():
    """FastAPI dependency returning the configured generation collaborator."""
    url = get_function_url()
    if not url:
        return LocalTemplateEngine()
    timeout = float(os.getenv("GENERATION_TIMEOUT_SECONDS", str(DEFAULT_TIMEOUT_SECONDS)))
    return GenerationClient(url, get_function_key(), timeout=timeout)
