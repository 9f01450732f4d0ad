"""
Dish Extraction using Gemini

Sends the user's receipt text to Gemini and asks for a JSON array of
{name, price, category} objects.

IMPORTANT BOUNDARIES:
1. This service ONLY proposes dishes - it never touches a split
2. Items that don't validate are dropped one by one and logged
3. A response that isn't a list at all is a MalformedExtractionError
4. Transport failures are retried, then raised as ExtractionUnavailableError
"""

import json
from typing import Any, Optional

import google.generativeai as genai
from pydantic import ValidationError
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from dietsplit.audit import get_logger
from dietsplit.config import get_settings
from dietsplit.config.settings import GeminiSettings
from dietsplit.models.split import DishType, ExtractedDish
from dietsplit.services.extraction.interface import (
    DishExtractor,
    ExtractionUnavailableError,
    MalformedExtractionError,
)


PROMPT_TEMPLATE = """Analyze the following text describing a meal or receipt.
Extract a list of dishes with their prices and dietary category.

Rules for category:
- meat: Contains meat, fish, or unknown ingredients.
- vegetarian: No meat or fish, but contains eggs, dairy or cheese.
- vegan: Plant-based only.

Respond with ONLY a JSON array in this exact format:
[{{"name": "dish name", "price": 12.5, "category": "vegan"}}]

Text to analyze: "{text}"
"""


class GeminiDishExtractor(DishExtractor):
    """
    Dish extractor backed by Google Gemini.

    Pass `model` to inject a pre-built (or fake) GenerativeModel and
    `wait` to override the backoff between retried requests.
    """

    def __init__(
        self,
        settings: Optional[GeminiSettings] = None,
        model: Any = None,
        max_attempts: int = 3,
        max_dish_price: Optional[float] = None,
        wait: Optional[wait_base] = None,
    ):
        self._settings = settings
        self._model = model
        self._max_attempts = max_attempts
        self._wait = wait if wait is not None else wait_exponential(multiplier=1, min=2, max=10)
        self._max_dish_price = (
            max_dish_price
            if max_dish_price is not None
            else get_settings().app.max_dish_price
        )
        self._logger = get_logger(__name__)

    def _get_model(self):
        """Configure Google Generative AI on first use."""
        if self._model is None:
            try:
                settings = self._settings or get_settings().gemini
            except ValidationError as e:
                raise ExtractionUnavailableError(f"Gemini is not configured: {e}") from e

            genai.configure(api_key=settings.api_key)
            self._model = genai.GenerativeModel(
                model_name=settings.model_name,
                generation_config={
                    "temperature": settings.temperature,
                    "max_output_tokens": settings.max_tokens,
                    "response_mime_type": "application/json",
                },
            )
        return self._model

    async def _generate(self, model, prompt: str) -> str:
        try:
            response = await model.generate_content_async(prompt)
        except Exception as e:
            raise ExtractionUnavailableError(f"Gemini request failed: {e}") from e

        try:
            return (response.text or "").strip()
        except ValueError as e:
            # Raised by the SDK when the response was blocked
            raise MalformedExtractionError(f"Gemini returned no text: {e}") from e

    async def extract_dishes(self, text: str) -> list[ExtractedDish]:
        """Extract dishes from `text`. Empty text gives an empty list."""
        if not text or not text.strip():
            return []

        prompt = PROMPT_TEMPLATE.format(text=text.strip())

        # Configuration errors surface here, outside the retry loop
        model = self._get_model()

        raw = ""
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self._max_attempts),
            wait=self._wait,
            retry=retry_if_exception_type(ExtractionUnavailableError),
            reraise=True,
        ):
            with attempt:
                raw = await self._generate(model, prompt)

        return self.parse_response(raw)

    def parse_response(self, raw: str) -> list[ExtractedDish]:
        """
        Turn Gemini's text into validated dishes.

        Tolerates prose around the JSON array. Drops items that fail
        validation or exceed the sanity price bound.
        """
        if not raw:
            return []

        start = raw.find("[")
        end = raw.rfind("]") + 1
        if start < 0 or end <= start:
            raise MalformedExtractionError("No JSON array in Gemini response")

        try:
            data = json.loads(raw[start:end])
        except json.JSONDecodeError as e:
            raise MalformedExtractionError(f"Invalid JSON from Gemini: {e}") from e

        if not isinstance(data, list):
            raise MalformedExtractionError("Gemini response is not a list")

        dishes = []
        for item in data:
            dish = self._to_dish(item)
            if dish is not None:
                dishes.append(dish)
        return dishes

    def _to_dish(self, item: Any) -> Optional[ExtractedDish]:
        if not isinstance(item, dict):
            self._logger.warning("extraction_item_dropped", reason="not an object")
            return None

        category = item.get("category", item.get("type"))
        if isinstance(category, str):
            category = category.strip().lower()
        if category not in {c.value for c in DishType}:
            # Unknown ingredients count as meat
            category = DishType.MEAT.value

        try:
            dish = ExtractedDish(
                name=item.get("name") or "",
                price=item.get("price"),
                category=category,
            )
        except ValidationError as e:
            self._logger.warning(
                "extraction_item_dropped",
                reason="validation",
                errors=[err["msg"] for err in e.errors()],
            )
            return None

        if dish.price > self._max_dish_price:
            self._logger.warning(
                "extraction_item_dropped",
                reason="price above bound",
                price=dish.price,
            )
            return None

        return dish
