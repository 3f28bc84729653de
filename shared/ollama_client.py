"""Ollama LLM client for the market analyzer."""
import httpx
import logging
from typing import List, Dict, Optional

logger = logging.getLogger(__name__)


def _merge_fields(response: str, thinking: str) -> str:
    """Merge Ollama response and thinking into a single parseable text.

    When both are present the thinking is wrapped in <think> tags and
    prepended, so parsers that strip the tags see only the answer. When only
    one is present it is returned unchanged.
    """
    r = (response or "").strip()
    t = (thinking or "").strip()
    if not t:
        return r
    if not r:
        return t
    return f"<think>{t}</think>\n{r}"


class OllamaClient:
    """Async Ollama client supporting both local and cloud API endpoints."""

    def __init__(
        self,
        host: str,
        model: str,
        api_key: Optional[str] = None,
        timeout: float = 300.0,
        think: bool = False,
    ):
        self.host = host.rstrip("/")
        self.default_model = model
        self.api_key = api_key
        self.timeout = timeout
        self.think = think

    def _get_headers(self) -> Dict[str, str]:
        """Return headers with optional Authorization for Ollama Cloud API."""
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _build_payload(
        self,
        messages: List[Dict[str, str]],
        model: Optional[str],
        temperature: float,
        max_tokens: int,
        json_mode: bool,
    ) -> Dict:
        payload = {
            "model": model or self.default_model,
            "messages": messages,
            "options": {
                "temperature": temperature,
                "num_predict": max_tokens,
            },
            "think": self.think,
            "stream": False,
        }
        if json_mode:
            payload["format"] = "json"
        return payload

    async def chat_async(
        self,
        messages: List[Dict[str, str]],
        model: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 4096,
        json_mode: bool = False,
    ) -> Dict:
        """
        Send a chat completion request to Ollama.

        Returns dict with 'response' text, 'thinking' text, 'merged' text
        (normalized for parsing), 'eval_count' (tokens), 'eval_duration' (ns).
        """
        payload = self._build_payload(messages, model, temperature, max_tokens, json_mode)

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            resp = await client.post(
                f"{self.host}/api/chat",
                json=payload,
                headers=self._get_headers(),
            )
            resp.raise_for_status()

        data = resp.json()
        msg = data.get("message", {})
        response = msg.get("content", "")
        thinking = msg.get("thinking", "")
        return {
            "response": response,
            "thinking": thinking,
            "merged": _merge_fields(response, thinking),
            "eval_count": data.get("eval_count", 0),
            "eval_duration": data.get("eval_duration", 0),
        }

    async def is_available(self) -> bool:
        """Check if Ollama is reachable."""
        try:
            async with httpx.AsyncClient(timeout=5.0) as client:
                resp = await client.get(
                    f"{self.host}/api/tags",
                    headers=self._get_headers(),
                )
                return resp.status_code == 200
        except httpx.HTTPError:
            return False
