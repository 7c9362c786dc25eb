import openai
import requests
import structlog

from pdf_rag_backend.core.errors import GenerationError

logger = structlog.get_logger(__name__)


class OpenAIGenerator:
    def __init__(self, client: openai.OpenAI, model: str, temperature: float = 0.2):
        self.client = client
        self.model = model
        self.temperature = temperature

    def generate(self, messages: list[dict]) -> str:
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=self.temperature,
            )
        except openai.OpenAIError as exc:
            raise GenerationError(f"Answer generation failed: {exc}") from exc

        content = (response.choices[0].message.content or "").strip() if response.choices else ""
        if not content:
            raise GenerationError("Answer generation returned an empty response")
        return content


class OllamaGenerator:
    def __init__(self, base_url: str, model: str, temperature: float = 0.2, timeout: float = 60.0):
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.temperature = temperature
        self.timeout = timeout

    def generate(self, messages: list[dict]) -> str:
        payload = {
            "model": self.model,
            "messages": messages,
            "stream": False,
            "options": {"temperature": self.temperature},
        }
        try:
            r = requests.post(f"{self.base_url}/api/chat", json=payload, timeout=self.timeout)
            r.raise_for_status()
            data = r.json()
        except (requests.RequestException, ValueError) as exc:
            raise GenerationError(f"Answer generation failed: {exc}") from exc

        content = (data.get("message") or {}).get("content", "").strip()
        if not content:
            raise GenerationError("Answer generation returned an empty response")
        return content
