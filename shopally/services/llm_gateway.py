"""Language-model gateway: intent extraction, product enhancement and comparison."""

import json
import re
from typing import Any, Dict, List

from pydantic import ValidationError
from pydantic.alias_generators import to_camel

from shopally.ai_agent.ranking import calculate_match_percentage
from shopally.models.product import Product
from shopally.services.openai_service import OpenAIService
from shopally.utils import LLMServiceError, logger
from shopally.utils.config import DEFAULT_SHIP_TO_COUNTRY, DEFAULT_TARGET_CURRENCY, DEFAULT_TARGET_LANGUAGE

BLOCKED_TERMS = (
    "drugs",
    "weapons",
    "firearms",
    "explosives",
    "contraband",
    "porn",
    "sex toys",
    "adult content",
    "erotic",
    "hentai",
    "illegal",
    "smuggled",
    "stolen goods",
    "counterfeit",
    "hate speech",
    "violence",
    "racist",
    "discriminatory",
)

LANGUAGE_NAMES = {"en": "English", "am": "Amharic"}


def extract_json_object(text: str) -> Dict[str, Any]:
    """
    Parse the JSON object embedded in a model response.

    Code fences are stripped first, then the outermost ``{...}`` span is parsed.

    Raises:
        ValueError: If no JSON object can be decoded
    """
    fenced = re.search(r"```(?:json)?\s*(.*?)\s*```", text, re.DOTALL)
    candidate = fenced.group(1) if fenced else text

    start = candidate.find("{")
    end = candidate.rfind("}")
    if start == -1 or end <= start:
        raise ValueError("No JSON object found in model response")

    data = json.loads(candidate[start : end + 1])
    if not isinstance(data, dict):
        raise ValueError("Model response JSON is not an object")
    return data


def is_blocked_query(query: str) -> bool:
    lowered = query.lower()
    return any(term in lowered for term in BLOCKED_TERMS)


class OpenAILLMGateway:
    """
    LLMGateway backed by OpenAI chat completions.

    Attributes:
        openai_service: Service performing the (retried) completions
    """

    def __init__(self, openai_service: OpenAIService):
        self.openai_service = openai_service

    async def parse_intent(self, query: str) -> Dict[str, Any]:
        """
        Extract search constraints from ``query``.

        Ship-to country, target currency and target language are always forced to the
        service defaults; ``is_etb`` defaults to true and blank keywords fall back to the query.

        Raises:
            LLMServiceError: If the query is blocked or the completion fails
        """
        normalized = query.strip()
        if is_blocked_query(normalized):
            logger.warning("⚠️ Blocked query with prohibited content: %s", normalized)
            raise LLMServiceError("Query contains prohibited content", status_code=400)

        prompt = f"""You are an e-commerce search intent parser. Extract parameters from shopping queries in any language (English, Amharic or mixed) and output ONLY a JSON object in English.

RULES:
- Use null for missing parameters
- All prices must be converted to and output in USD
- Understand prices written in words or numbers and ranges like "under 1000", "between 100 and 200"
- delivery_days is the maximum expected delivery days
- is_etb is true if the user specified ETB/birr or no currency, false if they specified USD/dollars
- keywords are always in English

JSON SCHEMA:
{{
  "keywords": "string",
  "category_ids": "string|null",
  "min_sale_price": number|null,
  "max_sale_price": number|null,
  "delivery_days": number|null,
  "ship_to_country": "{DEFAULT_SHIP_TO_COUNTRY}",
  "target_currency": "{DEFAULT_TARGET_CURRENCY}",
  "target_language": "{DEFAULT_TARGET_LANGUAGE}",
  "is_etb": boolean
}}

Example input: "gaming laptop under one thousand five hundred dollars"
Example output: {{"keywords": "gaming laptop", "min_sale_price": null, "max_sale_price": 1500.0, "category_ids": null, "delivery_days": null, "ship_to_country": "ET", "target_currency": "USD", "target_language": "en", "is_etb": false}}

INPUT QUERY: "{normalized}"
"""
        text = await self.openai_service.generate_response(prompt, use_json_mode=True, max_tokens=300)

        try:
            intent = extract_json_object(text)
        except ValueError as e:
            logger.warning("⚠️ Could not parse intent JSON (%s), using query as keywords", e)
            intent = {"keywords": normalized}

        intent["ship_to_country"] = DEFAULT_SHIP_TO_COUNTRY
        intent["target_currency"] = DEFAULT_TARGET_CURRENCY
        intent["target_language"] = DEFAULT_TARGET_LANGUAGE
        if intent.get("is_etb") is None:
            intent["is_etb"] = True

        keywords = intent.get("keywords")
        intent["keywords"] = keywords.strip() if isinstance(keywords, str) and keywords.strip() else normalized

        logger.info("✅ Parsed intent for '%s': %s", normalized, intent)
        return intent

    async def enhance_product(self, product: Product, query: str, language: str) -> Product:
        """
        Rewrite the descriptive text of ``product`` for ``query`` in ``language``.

        Identity fields are restored from the input and the match percentage is
        computed locally, so the model can only change descriptive text.

        Raises:
            LLMServiceError: If the completion fails or returns an unusable product
        """
        match_percentage = calculate_match_percentage(product, query)
        language_name = LANGUAGE_NAMES.get(language, language)

        prompt = f"""You are an expert e-commerce product content enhancer. Output ONLY a JSON object.

USER REQUEST: "{query}"
LANGUAGE: write all text fields in {language_name}.

Return the product JSON below with these fields rewritten to be clear and engaging:
- title: keep the meaning, make it more appealing if needed
- description: 3-4 sentences
- customerHighlights: benefit-focused
- customerReview: natural summary of buyer sentiment
- summaryBullets: 3-5 short bullet points
All other fields, numbers, URLs and IDs must stay exactly the same.

PRODUCT:
{json.dumps(product.to_json(), ensure_ascii=False, indent=2)}
"""
        text = await self.openai_service.generate_response(prompt, use_json_mode=True)

        try:
            rewritten = extract_json_object(text)
            # Merge under the camelCase aliases
            rewritten = {(to_camel(key) if "_" in key else key): value for key, value in rewritten.items()}
            enhanced = Product.model_validate({**product.to_json(), **rewritten})
        except (ValueError, ValidationError) as e:
            logger.error("❌ Unusable enhancement for product %s: %s", product.id, e)
            raise LLMServiceError(f"Unusable enhancement for product {product.id}") from e

        enhanced = enhanced.with_identity_of(product)
        enhanced.ai_match_percentage = match_percentage
        return enhanced

    async def compare_products(self, products: List[Product], language: str) -> Dict[str, Any]:
        """
        Produce a side-by-side comparison.

        Returns:
            Dict[str, Any]: ``{"comparison": [{"product": ..., "synthesis": {...}}]}``

        Raises:
            LLMServiceError: If the completion fails or has no comparison list
        """
        if not products:
            raise LLMServiceError("At least one product is required", status_code=400)

        payload = json.dumps({"products": [p.to_json() for p in products]}, ensure_ascii=False)
        prompt = f"""You are an assistant that compares e-commerce products. Return ONLY a JSON object with this shape:
{{
  "comparison": [
    {{"product": <original product>, "synthesis": {{"pros": [..], "cons": [..], "isBestValue": <bool>, "features": {{<name>: <value>}}}}}}
  ]
}}
Exactly one product must have isBestValue true. Respond in {LANGUAGE_NAMES.get(language, language)}.
Products JSON: {payload}
"""
        text = await self.openai_service.generate_response(prompt, use_json_mode=True, max_tokens=1500)

        try:
            result = extract_json_object(text)
        except ValueError as e:
            logger.error("❌ Could not parse comparison JSON: %s", e)
            raise LLMServiceError("Failed to parse comparison response") from e

        if not isinstance(result.get("comparison"), list):
            raise LLMServiceError("Comparison response has no comparison list")
        return result


class MockLLMGateway:
    """Deterministic gateway for local development without an API key."""

    PROS = {"en": ["Good price", "Decent rating"], "am": ["መልካም ዋጋ", "ጥሩ እውቅና"]}
    CONS = {"en": ["May lack accessories"], "am": ["አንዳንድ ንብረቶች ሊጎዱ ይችላሉ"]}

    async def parse_intent(self, query: str) -> Dict[str, Any]:
        return {"category": "smartphone"}

    async def enhance_product(self, product: Product, query: str, language: str) -> Product:
        return product.model_copy(deep=True)

    async def compare_products(self, products: List[Product], language: str) -> Dict[str, Any]:
        """Mark the cheapest product (in USD) as best value."""
        lang = language if language in self.PROS else "en"
        best_index = min(range(len(products)), key=lambda i: products[i].price.usd) if products else -1

        comparison = [
            {
                "product": product.to_json(),
                "synthesis": {
                    "pros": list(self.PROS[lang]),
                    "cons": list(self.CONS[lang]),
                    "isBestValue": index == best_index,
                    "features": {"Screen Type": "Unknown", "Processor": "Unknown"},
                },
            }
            for index, product in enumerate(products)
        ]
        return {"comparison": comparison}
