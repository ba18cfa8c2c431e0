"""
application.services.waste - Classify a photographed waste item.

The photo is uploaded as multipart form data to the external AI service,
which answers ``{success, waste_type, response}``. The free-text
``response`` carries the reuse advice; the service does not return
separate recycling steps, so a fixed pointer is shown instead.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

from greenhero.domain.exceptions import ClassificationError
from greenhero.domain.models import WasteClassification
from greenhero.domain.ports import ApiClient

logger = logging.getLogger(__name__)

DEFAULT_LABEL = "Classified Item"
RECYCLE_FALLBACK_STEP = "Please follow the advice in the Reuse tab for this item."
DEFAULT_LOCATION = "Check local recycling bins"


class WasteClassifierService:
    """Upload an image and map the verdict onto a WasteClassification."""

    def __init__(self, api: ApiClient, classifier_url: str):
        self._api = api
        self._classifier_url = classifier_url

    async def classify(self, image_path: Union[str, Path]) -> WasteClassification:
        """Classify the item in ``image_path``.

        Raises:
            ClassificationError: The image is unreadable, or the service could
                                 not analyze it.
            TransportError:      The service could not be reached.
        """
        path = Path(image_path)
        try:
            content = path.read_bytes()
        except OSError as e:
            raise ClassificationError(f"Image file not found: {path}") from e

        logger.info("Classifying %s (%d bytes)", path.name, len(content))
        response = await self._api.request(
            "POST", self._classifier_url,
            files=[("image", ("upload.jpg", content, "image/jpeg"))],
        )

        if not response.ok or not response.get("success"):
            raise ClassificationError(
                response.message("error", default="Could not analyze item."),
                status=response.status,
                body=response.body,
            )

        advice = response.get("response")
        result = WasteClassification(
            label=response.get("waste_type") or DEFAULT_LABEL,
            suggestions=[advice] if isinstance(advice, str) and advice else [],
            recycle_steps=[RECYCLE_FALLBACK_STEP],
            location=DEFAULT_LOCATION,
        )
        logger.info("Classified %s as %r", path.name, result.label)
        return result
