"""
AI copywriting for the showroom: product blurbs and one-line business tips
Falls back to fixed placeholder text when OpenAI is not configured or fails
"""

import logging
from typing import Optional

from openai import AsyncOpenAI

from ..config.settings import get_settings
from ..models import StockType

logger = logging.getLogger(__name__)

INSIGHTS_UNAVAILABLE = "Insights unavailable without API Key."
INSIGHTS_ERROR = "Could not generate insights."
INSIGHTS_EMPTY = "Keep monitoring your stock levels."
DESCRIPTION_ERROR = "Error generating description. Please try again."
DESCRIPTION_EMPTY = "No description generated."


class TextGenerationService:
    """Generate marketing and dashboard text with OpenAI"""

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None,
                 client: Optional[AsyncOpenAI] = None):
        settings = get_settings()
        self.api_key = settings.OPENAI_API_KEY if api_key is None else api_key
        self.model = model or settings.OPENAI_MODEL

        self.openai_client = client
        if self.openai_client is None and self.api_key:
            self.openai_client = AsyncOpenAI(api_key=self.api_key)

    @property
    def enabled(self) -> bool:
        return self.openai_client is not None

    async def _complete(self, prompt: str, max_tokens: int) -> str:
        response = await self.openai_client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            temperature=0.7,
            max_tokens=max_tokens,
        )
        content = response.choices[0].message.content if response.choices else None
        return (content or "").strip()

    async def generate_marketing_description(self, name: str, stock_type: StockType, size: str) -> str:
        """Short, high-end product description for a tile"""
        type_label = stock_type.value if isinstance(stock_type, StockType) else str(stock_type)
        if not self.enabled:
            logger.warning("OpenAI API key is missing. Returning placeholder description.")
            return f"Premium {type_label} tile ({size}), perfect for modern interiors."

        prompt = (
            "Write a short, compelling, high-end marketing description (max 2 sentences) for a tile product.\n"
            f"Product Name: {name}\n"
            f"Material Type: {type_label}\n"
            f"Size: {size}\n"
            "Tone: Professional, luxurious, architectural."
        )
        try:
            text = await self._complete(prompt, max_tokens=120)
            return text or DESCRIPTION_EMPTY
        except Exception as e:
            logger.error(f"❌ OpenAI description error: {e}")
            return DESCRIPTION_ERROR

    async def generate_business_insight(self, total_stock_value: float, stock_count: int,
                                        top_category: str) -> str:
        """One actionable inventory/sales tip from a stock snapshot"""
        if not self.enabled:
            return INSIGHTS_UNAVAILABLE

        prompt = (
            "You are a business analyst for a tile company.\n"
            "Current Stats:\n"
            f"- Total Stock Value: ${total_stock_value}\n"
            f"- Total Unique Items: {stock_count}\n"
            f"- Most Popular Category: {top_category}\n\n"
            "Give me one brief, actionable tip (1 sentence) to optimize inventory or sales based on this snapshot."
        )
        try:
            text = await self._complete(prompt, max_tokens=80)
            return text or INSIGHTS_EMPTY
        except Exception as e:
            logger.error(f"❌ OpenAI insight error: {e}")
            return INSIGHTS_ERROR
