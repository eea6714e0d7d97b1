"""FastAPI application that proxies creative AI requests to the AI gateway."""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional, TypeVar

from fastapi import Body, Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from studio_gateway.clients.ai_gateway import AIGatewayClient, AIGatewayError, EmptyResponseError
from studio_gateway.config import Settings, get_settings
from studio_gateway.errors import (
    RateLimitExceeded,
    StudioError,
    UnexpectedError,
    UpstreamError,
    ValidationError,
)
from studio_gateway.logging_config import configure_logging
from studio_gateway.prompts import ENHANCE_TYPES, IMAGE_STYLES
from studio_gateway.rate_limit import ENDPOINT_POLICIES, FixedWindowRateLimiter
from studio_gateway.store import InMemoryRateLimitStore
from studio_gateway.utils import (
    client_identifier,
    optional_prompt,
    optional_text,
    require_choice,
    require_image_base64,
    require_images,
    require_messages,
    require_prompt,
)

configure_logging()
LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

settings = get_settings()
client = AIGatewayClient(settings)
rate_limiter = FixedWindowRateLimiter(InMemoryRateLimitStore(max_keys=settings.rate_limit_max_keys))

CORS_ALLOW_HEADERS = ["authorization", "x-client-info", "apikey", "content-type"]

app = FastAPI(title="AI Studio Gateway")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["POST", "OPTIONS"],
    allow_headers=CORS_ALLOW_HEADERS,
)


@app.exception_handler(StudioError)
async def handle_studio_error(request: Request, exc: StudioError) -> JSONResponse:
    headers = None
    if isinstance(exc, RateLimitExceeded):
        headers = {"Retry-After": str(exc.retry_after or 60)}
    return JSONResponse({"error": exc.message}, status_code=exc.status_code, headers=headers)


@app.exception_handler(RequestValidationError)
async def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    LOGGER.info("malformed request body", extra={"detail": exc.errors()})
    return JSONResponse({"error": "Invalid request body"}, status_code=400)


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    LOGGER.exception("Unhandled exception", extra={"client_ip": client_identifier(request.headers)})
    return JSONResponse({"error": "Internal server error"}, status_code=500)


def get_client(settings: Settings = Depends(get_settings)) -> AIGatewayClient:
    """Provide a configured AI gateway client."""

    return client


def get_rate_limiter() -> FixedWindowRateLimiter:
    """Provide the process-wide rate limiter."""

    return rate_limiter


def rate_limited(endpoint: str) -> Callable[..., str]:
    """Build a dependency enforcing the quota of ``endpoint``.

    It runs before body validation, so rejected bodies still count.
    """

    policy = ENDPOINT_POLICIES[endpoint]

    def enforce(
        request: Request, limiter: FixedWindowRateLimiter = Depends(get_rate_limiter)
    ) -> str:
        client_id = client_identifier(request.headers)
        result = limiter.check_policy(policy, client_id)
        if not result.allowed:
            LOGGER.warning(
                "rate limit exceeded",
                extra={
                    "client_ip": client_id,
                    "endpoint": endpoint,
                    "retry_after": result.retry_after,
                },
            )
            raise RateLimitExceeded(result.retry_after)
        return client_id

    return enforce


def _proxy(
    endpoint: str,
    call: Callable[[], T],
    *,
    failure: str,
    unexpected: str,
    empty: Optional[str] = None,
) -> T:
    """Run a gateway call and translate its failures into client-safe errors."""

    try:
        return call()
    except StudioError:
        raise
    except EmptyResponseError as exc:
        LOGGER.error("empty ai gateway response", extra={"endpoint": endpoint, "detail": str(exc)})
        raise UpstreamError(exc.user_message or empty or failure) from exc
    except AIGatewayError as exc:
        LOGGER.warning(
            "AI gateway error",
            extra={"endpoint": endpoint, "status": exc.status_code, "detail": str(exc)},
        )
        if exc.status_code == 429:
            raise UpstreamError("Service is busy. Please try again later.", 429) from exc
        if exc.status_code == 402:
            raise UpstreamError("Service quota exceeded. Please contact support.", 503) from exc
        raise UpstreamError(exc.user_message or failure) from exc
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("Unexpected failure", extra={"endpoint": endpoint})
        raise UnexpectedError(unexpected) from exc


@app.get("/")
def index() -> dict:
    """Describe the service and its quotas."""

    return {
        "name": "AI Studio Gateway",
        "status": "running",
        "endpoints": {
            name: {"path": f"/api/{name}", "limit": policy.limit, "windowMs": policy.window_ms}
            for name, policy in ENDPOINT_POLICIES.items()
        },
    }


@app.options("/api/{endpoint}")
def options(endpoint: str) -> Response:
    """Answer bare OPTIONS requests that the CORS middleware lets through."""

    if endpoint not in ENDPOINT_POLICIES:
        raise HTTPException(status_code=404, detail="Not Found")
    headers = {"Access-Control-Allow-Headers": ", ".join(CORS_ALLOW_HEADERS)}
    if "*" in settings.cors_origins:
        headers["Access-Control-Allow-Origin"] = "*"
    return Response(status_code=200, headers=headers)


@app.post("/api/chat")
def chat(
    payload: Dict[str, Any] = Body(...),
    client_id: str = Depends(rate_limited("chat")),
    gateway: AIGatewayClient = Depends(get_client),
) -> dict:
    """Answer a chat transcript."""

    messages = require_messages(payload.get("messages"))
    model = optional_text(payload.get("model"), "Invalid model format")

    reply = _proxy(
        "chat",
        lambda: gateway.chat(messages, model),
        failure="Unable to process request",
        unexpected="Failed to process chat request",
        empty="Unable to generate response",
    )
    return {"message": reply}


@app.post("/api/edit-image")
def edit_image(
    payload: Dict[str, Any] = Body(...),
    client_id: str = Depends(rate_limited("edit-image")),
    gateway: AIGatewayClient = Depends(get_client),
) -> dict:
    """Edit an uploaded image according to a prompt."""

    image_base64 = payload.get("imageBase64")
    prompt = payload.get("prompt")
    if not image_base64 or not prompt:
        raise ValidationError("Image and prompt are required")
    if not isinstance(prompt, str) or not isinstance(image_base64, str):
        raise ValidationError("Invalid input format")
    require_prompt(prompt, settings.max_prompt_length)
    require_image_base64(image_base64, settings.max_image_bytes)

    image_url = _proxy(
        "edit-image",
        lambda: gateway.edit_image(image_base64, prompt),
        failure="Unable to edit image",
        unexpected="Failed to edit image",
        empty="Unable to edit image - no image data in response",
    )
    return {"imageUrl": image_url}


@app.post("/api/generate-image")
def generate_image(
    payload: Dict[str, Any] = Body(...),
    client_id: str = Depends(rate_limited("generate-image")),
    gateway: AIGatewayClient = Depends(get_client),
) -> dict:
    """Generate an image from a text prompt."""

    prompt = require_prompt(payload.get("prompt"), settings.max_prompt_length)
    style = require_choice(payload.get("style") or None, IMAGE_STYLES, "Invalid style parameter")

    image_url = _proxy(
        "generate-image",
        lambda: gateway.generate_image(prompt, style),
        failure="Unable to generate image",
        unexpected="Failed to generate image",
        empty=(
            "Unable to generate image. The AI service may be temporarily unavailable "
            "or out of credits."
        ),
    )
    return {"imageUrl": image_url}


@app.post("/api/enhance-prompt")
def enhance_prompt(
    payload: Dict[str, Any] = Body(...),
    client_id: str = Depends(rate_limited("enhance-prompt")),
    gateway: AIGatewayClient = Depends(get_client),
) -> dict:
    """Rewrite a rough prompt into a detailed one."""

    prompt = require_prompt(
        payload.get("prompt"),
        settings.max_prompt_length,
        length_message="Prompt exceeds maximum length",
    )
    prompt_type = require_choice(
        payload.get("type") or "generate", ENHANCE_TYPES, "Invalid type parameter"
    )
    language = optional_text(payload.get("language"))

    enhanced = _proxy(
        "enhance-prompt",
        lambda: gateway.enhance_prompt(prompt, prompt_type=prompt_type, language=language),
        failure="Unable to enhance prompt",
        unexpected="Failed to enhance prompt",
    )
    return {"enhancedPrompt": enhanced}


@app.post("/api/image-to-prompt")
def image_to_prompt(
    payload: Dict[str, Any] = Body(...),
    client_id: str = Depends(rate_limited("image-to-prompt")),
    gateway: AIGatewayClient = Depends(get_client),
) -> dict:
    """Turn an image or an idea into prompts tuned for several image models."""

    image_base64 = payload.get("imageBase64") or None
    if image_base64 is not None:
        require_image_base64(image_base64, settings.max_image_bytes)
    text_input = optional_prompt(payload.get("textInput"), settings.max_prompt_length)
    if image_base64 is None and text_input is None:
        raise ValidationError("Image or text input is required")
    style = optional_text(payload.get("style"))
    mood = optional_text(payload.get("mood"))
    negative_prompt = optional_text(payload.get("negativePrompt"))

    result = _proxy(
        "image-to-prompt",
        lambda: gateway.image_to_prompt(
            image_base64=image_base64,
            text_input=text_input,
            style=style,
            mood=mood,
            negative_prompt=negative_prompt,
        ),
        failure="Unable to generate prompts",
        unexpected="Failed to generate prompts",
    )
    return {"prompts": result}


@app.post("/api/remix-images")
def remix_images(
    payload: Dict[str, Any] = Body(...),
    client_id: str = Depends(rate_limited("remix-images")),
    gateway: AIGatewayClient = Depends(get_client),
) -> dict:
    """Blend up to four images into one."""

    images = require_images(payload.get("images"))
    prompt = optional_prompt(payload.get("prompt"), settings.max_prompt_length)
    failure = "Unable to remix image" if len(images) == 1 else "Unable to remix images"

    image_url = _proxy(
        "remix-images",
        lambda: gateway.remix_images(images, prompt),
        failure=failure,
        unexpected="Failed to remix images",
    )
    return {"imageUrl": image_url}
