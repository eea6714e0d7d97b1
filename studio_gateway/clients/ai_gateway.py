"""AI gateway chat-completions client."""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

import requests
from requests import Response

from studio_gateway import prompts
from studio_gateway.config import Settings
from studio_gateway.errors import ConfigurationError

LOGGER = logging.getLogger(__name__)


class AIGatewayError(RuntimeError):
    """Raised when the AI gateway call fails.

    ``user_message`` optionally names the failed step in client-safe terms.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        user_message: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.user_message = user_message


class EmptyResponseError(AIGatewayError):
    """Raised when a successful response lacks the expected payload."""


class AIGatewayClient:
    """Thin HTTP client that builds one chat-completions request per capability."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._session = requests.Session()
        self._session.headers.update({"Content-Type": "application/json"})

    def complete(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """POST ``payload`` to the gateway and return the decoded JSON body."""

        if not self._settings.has_credentials:
            LOGGER.error("AI gateway API key not configured")
            raise ConfigurationError()

        headers = {"Authorization": f"Bearer {self._settings.gateway_api_key}"}
        LOGGER.info("ai gateway request", extra={"model": payload.get("model")})
        try:
            response = self._session.post(
                self._settings.gateway_url,
                json=payload,
                headers=headers,
                timeout=self._settings.gateway_timeout_seconds,
            )
        except requests.RequestException as exc:
            LOGGER.error("ai gateway unreachable", extra={"detail": str(exc)})
            raise AIGatewayError(f"AI gateway request failed: {exc}") from exc

        self._raise_for_status(response)
        try:
            return response.json()
        except ValueError as exc:
            raise AIGatewayError("AI gateway returned a non-JSON body", response.status_code) from exc

    def chat(self, messages: List[Dict[str, Any]], model: Optional[str] = None) -> str:
        """Return the assistant reply for a transcript."""

        data = self.complete(
            {
                "model": model or self._settings.chat_model,
                "messages": [{"role": "system", "content": prompts.CHAT_SYSTEM_PROMPT}, *messages],
                "stream": False,
            }
        )
        return extract_message_content(data)

    def generate_image(self, prompt: str, style: Optional[str] = None) -> str:
        """Return an image URL for ``prompt`` rendered in ``style``."""

        if style and style != "none":
            prompt = f"{prompt}, {prompts.STYLE_SUFFIXES.get(style, '')}"
        data = self._image_request([{"role": "user", "content": prompt}])
        return extract_image_url(data)

    def edit_image(self, image_base64: str, prompt: str) -> str:
        """Return the URL of ``image_base64`` edited according to ``prompt``."""

        LOGGER.info("sending edit request", extra={"detail": {"image_length": len(image_base64)}})
        content = [
            {"type": "text", "text": prompt},
            {"type": "image_url", "image_url": {"url": f"data:image/png;base64,{image_base64}"}},
        ]
        data = self._image_request([{"role": "user", "content": content}])
        return extract_image_url(data)

    def enhance_prompt(
        self, prompt: str, *, prompt_type: str = "generate", language: Optional[str] = None
    ) -> str:
        """Rewrite ``prompt`` into a detailed prompt for the given task type."""

        system_prompt = prompts.ENHANCE_SYSTEM_PROMPTS[prompt_type]
        if language == "fa":
            system_prompt += prompts.FARSI_NOTE
        data = self.complete(
            {
                "model": self._settings.enhance_model,
                "messages": [
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": prompt},
                ],
            }
        )
        return extract_message_content(data)

    def image_to_prompt(
        self,
        *,
        image_base64: Optional[str] = None,
        text_input: Optional[str] = None,
        style: Optional[str] = None,
        mood: Optional[str] = None,
        negative_prompt: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Describe an image (or expand an idea) and derive per-model prompts."""

        if image_base64:
            content: Any = [
                {"type": "text", "text": prompts.IMAGE_ANALYSIS_PROMPT},
                {
                    "type": "image_url",
                    "image_url": {"url": f"data:image/jpeg;base64,{image_base64}"},
                },
            ]
        else:
            content = prompts.TEXT_EXPANSION_TEMPLATE.format(
                style=f"Style: {style}." if style else "",
                mood=f"Mood: {mood}." if mood else "",
                idea=text_input or "",
            )
        try:
            description = extract_message_content(
                self.complete(
                    {
                        "model": self._settings.text_model,
                        "messages": [{"role": "user", "content": content}],
                    }
                )
            )
        except AIGatewayError as exc:
            exc.user_message = "Unable to analyze image" if image_base64 else "Unable to enhance text"
            raise

        negative = f'User wants to avoid: "{negative_prompt}".' if negative_prompt else ""
        data = self.complete(
            {
                "model": self._settings.text_model,
                "messages": [
                    {
                        "role": "user",
                        "content": prompts.MODEL_PROMPTS_TEMPLATE.format(
                            description=description, negative=negative
                        ),
                    }
                ],
                "response_format": {"type": "json_object"},
            }
        )
        raw = extract_message_content(data)
        try:
            parsed = json.loads(raw)
        except ValueError as exc:
            raise EmptyResponseError("Model prompts were not valid JSON") from exc
        if not isinstance(parsed, dict):
            raise EmptyResponseError("Model prompts were not a JSON object")
        return parsed

    def remix_images(self, images: List[str], prompt: Optional[str] = None) -> str:
        """Blend one or more images into a new one and return its URL."""

        remix_prompt = prompt or prompts.DEFAULT_REMIX_PROMPT
        if len(images) == 1:
            text = f"{remix_prompt} {prompts.SINGLE_REMIX_SUFFIX}"
        else:
            text = f"{remix_prompt} {prompts.MULTI_REMIX_SUFFIX.format(count=len(images))}"
        content = [{"type": "text", "text": text}]
        content.extend({"type": "image_url", "image_url": {"url": image}} for image in images)
        data = self._image_request([{"role": "user", "content": content}])
        return extract_image_url(data)

    def _image_request(self, messages: List[Dict[str, Any]]) -> Dict[str, Any]:
        return self.complete(
            {
                "model": self._settings.image_model,
                "messages": messages,
                "modalities": ["image", "text"],
            }
        )

    def _raise_for_status(self, response: Response) -> None:
        """Raise descriptive errors for gateway responses."""

        if response.ok:
            return
        status = response.status_code
        detail = response.text
        if status == 429:
            message = "AI gateway rate limit reached."
        elif status == 402:
            message = "AI gateway credits exhausted."
        elif status in (401, 403):
            message = "AI gateway rejected the API key."
        else:
            message = f"AI gateway error ({status})."
        LOGGER.error("ai gateway request failed", extra={"status": status, "detail": detail})
        raise AIGatewayError(f"{message} Response: {detail[:200]}", status)


def _first_message(data: Dict[str, Any]) -> Dict[str, Any]:
    choices = data.get("choices") or []
    if not choices or not isinstance(choices[0], dict):
        return {}
    return choices[0].get("message") or {}


def extract_message_content(data: Dict[str, Any]) -> str:
    """Return ``choices[0].message.content`` or raise :class:`EmptyResponseError`."""

    content = _first_message(data).get("content")
    if not content or not isinstance(content, str):
        raise EmptyResponseError("No message content in AI gateway response")
    return content


def extract_image_url(data: Dict[str, Any]) -> str:
    """Return ``choices[0].message.images[0].image_url.url``."""

    images = _first_message(data).get("images") or []
    url = None
    if images and isinstance(images[0], dict):
        url = (images[0].get("image_url") or {}).get("url")
    if not url:
        LOGGER.error("no image in ai gateway response", extra={"detail": json.dumps(data)[:500]})
        raise EmptyResponseError("No image data in AI gateway response")
    return url
