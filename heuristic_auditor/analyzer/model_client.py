"""
Client for the vision/text model endpoint.

Speaks the OpenAI-compatible chat completions protocol over aiohttp and
returns the decoded JSON object from the model's reply.
"""

import asyncio
import json
import re
from typing import Any, Dict, Optional

import aiohttp
from aiohttp import ClientError, ClientTimeout

from ..exceptions import ModelCallError
from ..utils.config import Settings
from ..utils.images import image_data_url
from ..utils.log import get_logger

FENCE_PATTERN = re.compile(r"^```(?:json)?\s*|\s*```$", re.I)


def extract_json_object(content: str) -> Dict[str, Any]:
    """
    Decode the JSON object in a model reply.

    Strips markdown code fences and any prose around the outermost braces.

    Raises:
        ModelCallError: If no JSON object can be decoded
    """
    if not isinstance(content, str):
        raise ModelCallError("Model reply content is not text")
    text = FENCE_PATTERN.sub("", content.strip())
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        raise ModelCallError("Model reply contained no JSON object")
    try:
        decoded = json.loads(text[start:end + 1])
    except json.JSONDecodeError as e:
        raise ModelCallError(f"Model reply was not valid JSON: {e}")
    if not isinstance(decoded, dict):
        raise ModelCallError("Model reply JSON is not an object")
    return decoded


class ModelClient:
    """
    Calls a chat completions endpoint with an instruction and an inline image.

    A session is created per call unless one is supplied, so the client can
    be shared freely between concurrent evaluator tasks.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str,
        timeout: float = 60,
        temperature: float = 0.1,
        session: Optional[aiohttp.ClientSession] = None
    ):
        """
        Initialize the model client.

        Args:
            api_key: Bearer token for the endpoint
            base_url: Endpoint base URL (".../v1" style, without /chat/completions)
            timeout: Per-call timeout in seconds
            temperature: Sampling temperature
            session: Optional shared aiohttp session
        """
        self.api_key = api_key
        self.endpoint = base_url.rstrip("/") + "/chat/completions"
        self.timeout = ClientTimeout(total=timeout)
        self.temperature = temperature
        self._session = session
        self.logger = get_logger("model_client")

    @classmethod
    def from_settings(cls, settings: Settings) -> "ModelClient":
        return cls(
            api_key=settings.api_key,
            base_url=settings.base_url,
            timeout=settings.request_timeout,
            temperature=settings.temperature,
        )

    def _build_request(self, instruction: str, image: Optional[bytes], model: str) -> Dict[str, Any]:
        content = [{"type": "text", "text": instruction}]
        if image:
            content.append({"type": "image_url", "image_url": {"url": image_data_url(image)}})
        return {
            "model": model,
            "temperature": self.temperature,
            "response_format": {"type": "json_object"},
            "messages": [{"role": "user", "content": content}],
        }

    async def complete_json(
        self,
        instruction: str,
        image: Optional[bytes] = None,
        *,
        model: str
    ) -> Dict[str, Any]:
        """
        Send one request and decode the JSON object in the reply.

        Args:
            instruction: Full instruction text
            image: Optional image bytes sent inline
            model: Model name

        Returns:
            Decoded JSON object

        Raises:
            ModelCallError: On transport errors, non-2xx status, timeouts or
                a reply without a JSON object
        """
        if not self.api_key:
            raise ModelCallError("No API key configured for the model endpoint")

        payload = self._build_request(instruction, image, model)
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        try:
            if self._session is not None:
                data = await self._post(self._session, payload, headers)
            else:
                async with aiohttp.ClientSession(timeout=self.timeout) as session:
                    data = await self._post(session, payload, headers)
        except ClientError as e:
            raise ModelCallError(f"Model request failed: {e}")
        except asyncio.TimeoutError:
            raise ModelCallError(f"Model request timed out after {self.timeout.total}s")

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            raise ModelCallError("Model response had no message content")

        if isinstance(content, list):
            # Some gateways return content parts
            content = "".join(
                part.get("text", "") for part in content if isinstance(part, dict)
            )
        if not isinstance(content, str):
            raise ModelCallError(
                f"Model message content has unexpected type: {type(content).__name__}"
            )
        return extract_json_object(content)

    async def _post(
        self,
        session: aiohttp.ClientSession,
        payload: Dict[str, Any],
        headers: Dict[str, str]
    ) -> Dict[str, Any]:
        async with session.post(self.endpoint, json=payload, headers=headers, timeout=self.timeout) as response:
            if response.status >= 400:
                body = await response.text()
                raise ModelCallError(f"Model endpoint returned HTTP {response.status}: {body[:200]}")
            try:
                return await response.json(content_type=None)
            except (json.JSONDecodeError, ValueError) as e:
                raise ModelCallError(f"Model endpoint returned invalid JSON: {e}")
