"""
Insurance card scanning via a managed vision model.

The image is sent to Gemini for plain text recognition; the recognised text
is then handed to the rule-based field extractor. Every failure (download,
API, empty recognition) comes back as a structured ScanResult.
"""

import os
import logging
from typing import Optional

import requests
import google.generativeai as genai

from models import ScanResult
from .card_extractor import extract_insurance_data

logger = logging.getLogger(__name__)

DEFAULT_VISION_MODEL = os.environ.get("GEMINI_MODEL", "gemini-2.5-flash")
DOWNLOAD_TIMEOUT_SECONDS = 30

OCR_PROMPT = (
    "Transcribe every piece of text printed on this insurance card exactly as it appears. "
    "Keep one printed line per output line. Do not summarise, translate or add commentary."
)


class CardScanner:
    def __init__(self, api_key: str | None = None, model_name: str = DEFAULT_VISION_MODEL, model=None):
        if model is None:
            self.api_key = api_key or os.environ.get("GOOGLE_API_KEY")
            if not self.api_key:
                raise ValueError("GOOGLE_API_KEY not found. Please set it in environment.")
            genai.configure(api_key=self.api_key)
            model = genai.GenerativeModel(model_name)
        self.model = model

    def download_image(self, image_url: str) -> tuple[bytes, str]:
        response = requests.get(image_url, timeout=DOWNLOAD_TIMEOUT_SECONDS)
        response.raise_for_status()
        mime_type = response.headers.get("Content-Type", "image/jpeg").split(";")[0].strip()
        return response.content, mime_type or "image/jpeg"

    def recognize_text(self, image_bytes: bytes, mime_type: str = "image/jpeg") -> str:
        """Return all text the vision model can read on the image."""
        response = self.model.generate_content(
            [OCR_PROMPT, {"mime_type": mime_type, "data": image_bytes}],
            generation_config=genai.GenerationConfig(temperature=0.0)
        )
        return (response.text or "").strip()

    def scan(
        self,
        image_bytes: Optional[bytes] = None,
        image_url: Optional[str] = None,
        mime_type: str = "image/jpeg"
    ) -> ScanResult:
        if not image_bytes and not image_url:
            return ScanResult(success=False, error="Image URL is required")

        try:
            if not image_bytes:
                image_bytes, mime_type = self.download_image(image_url)
            full_text = self.recognize_text(image_bytes, mime_type)
        except requests.RequestException as e:
            logger.error(f"Failed to download insurance card image: {e}")
            return ScanResult(success=False, error="Failed to download image")
        except Exception as e:
            logger.error(f"Error processing insurance card: {e}")
            return ScanResult(success=False, error=str(e) or "Failed to process insurance card")

        if not full_text:
            return ScanResult(success=False, error="No text detected in image")

        data = extract_insurance_data(full_text)
        if image_url:
            data = data.model_copy(update={"image_url": image_url})

        logger.info(f"Insurance card scanned: {data.fields_found} fields, confidence {data.confidence}")
        return ScanResult(success=True, data=data)
