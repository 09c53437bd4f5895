"""OpenAI Responses API client that turns utterances into calorie entries."""

import json
from dataclasses import dataclass

from openai import AsyncOpenAI

from calorie_ledger.services.extraction import ExtractionClient


@dataclass
class OpenAIExtractionClient(ExtractionClient):
    """Asks an OpenAI model for food and exercise entries as strict JSON."""

    client: AsyncOpenAI

    @classmethod
    def create(
        cls, api_key: str, timeout_seconds: float = 30.0
    ) -> "OpenAIExtractionClient":
        """Create a client whose requests give up after the timeout."""
        return cls(client=AsyncOpenAI(api_key=api_key, timeout=timeout_seconds))

    async def extract(
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        schema: dict[str, object],
        prompt: str,
    ) -> object:
        """Return the decoded calorie-entry payload for one utterance prompt."""
        request_payload: dict[str, object] = {
            "model": model,
            "input": [
                {
                    "role": "user",
                    "content": [{"type": "input_text", "text": prompt}],
                }
            ],
            "text": {
                "format": {
                    "type": "json_schema",
                    "name": "calorie_entries",
                    "strict": True,
                    "schema": schema,
                }
            },
            "store": store,
        }
        if reasoning_effort:
            request_payload["reasoning"] = {"effort": reasoning_effort}

        response = await self.client.responses.create(**request_payload)
        output_text = response.output_text
        if not output_text:
            raise RuntimeError(f"{model} returned no calorie entries")
        try:
            return json.loads(output_text)
        except ValueError as exc:
            raise RuntimeError(f"{model} returned non-JSON calorie entries") from exc

    async def close(self) -> None:
        """Release the pooled HTTP connections."""
        await self.client.close()
