"""
Structured AI analysis of indexed advertisements.

Asks the index's analysis endpoint for tags constrained by ANALYSIS_SCHEMA.
The stage never fails an item: remote errors and unusable responses are
logged and produce an empty AnalysisResult.
"""

import json
import logging
import re
from dataclasses import asdict, dataclass, fields
from typing import Any, Optional

from src.config import IngestConfig
from src.errors import AnalysisError
from src.index import IndexServiceError, VideoIndexClient
from src.logger import log_function


THEMES = [
    "Humor", "Emotional", "Inspirational", "Educational", "Dramatic",
    "Nostalgic", "Adventurous", "Romantic", "Celebratory", "Empowering",
]
EMOTIONS = [
    "Happy", "Sad", "Exciting", "Calming", "Suspenseful", "Heartwarming",
    "Confident", "Playful", "Hopeful", "Nostalgic", "Empowering",
]
VISUAL_STYLES = [
    "Cinematic", "Animated", "Documentary", "Minimalist", "Bold/Colorful",
    "Black & White", "Retro", "High-energy", "Lifestyle", "Glamorous", "Artistic",
]
SENTIMENTS = ["Positive", "Neutral", "Provocative", "Negative"]
PRODUCT_CATEGORIES = [
    "Auto", "Tech", "Finance", "Insurance", "Healthcare", "Retail",
    "Food & Beverage", "Household & Personal Care", "Entertainment", "Sports",
    "Travel", "Telecom", "Beauty", "Fashion", "Luxury", "Education", "Other",
]
ERAS = ["1970s", "1980s", "1990s", "2000s", "2010s", "2020s"]

ANALYSIS_SCHEMA = {
    "type": "json_schema",
    "json_schema": {
        "type": "object",
        "properties": {
            "brand": {
                "type": "string",
                "description": "The brand or company featured in the ad",
            },
            "theme": {"type": "string", "enum": THEMES},
            "emotion": {"type": "string", "enum": EMOTIONS},
            "visual_style": {"type": "string", "enum": VISUAL_STYLES},
            "sentiment": {"type": "string", "enum": SENTIMENTS},
            "product_category": {"type": "string", "enum": PRODUCT_CATEGORIES},
            "era_decade": {"type": "string", "enum": ERAS},
            "celebrities": {
                "type": "string",
                "description": "Any celebrities featured (empty string if none)",
            },
        },
    },
}

_CODE_FENCE = re.compile(r"^\s*```(?:json)?\s*|\s*```\s*$", re.IGNORECASE)


@dataclass(frozen=True)
class AnalysisResult:
    """Tags produced by the analysis endpoint; every field is optional."""

    theme: Optional[str] = None
    emotion: Optional[str] = None
    visual_style: Optional[str] = None
    sentiment: Optional[str] = None
    product_category: Optional[str] = None
    era_decade: Optional[str] = None
    celebrities: Optional[str] = None
    brand: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "AnalysisResult":
        """Keep schema fields only; lists are joined, blanks become None."""
        values = {}
        for f in fields(cls):
            value = data.get(f.name)
            if isinstance(value, (list, tuple)):
                value = ", ".join(str(v).strip() for v in value if str(v).strip())
            if value is None:
                continue
            text = str(value).strip()
            if text:
                values[f.name] = text
        return cls(**values)

    def as_dict(self) -> dict[str, str]:
        return {k: v for k, v in asdict(self).items() if v is not None}

    @property
    def is_empty(self) -> bool:
        return not self.as_dict()


def parse_analysis_payload(payload: Any) -> dict[str, Any]:
    """
    Decode the ``data`` field of an analysis response.

    Accepts an already decoded object or a JSON string, optionally wrapped
    in a markdown code fence.

    Raises:
        AnalysisError: If the payload is empty or not a JSON object
    """
    if payload is None:
        raise AnalysisError("empty analysis response")
    if isinstance(payload, dict):
        return payload
    if not isinstance(payload, str):
        raise AnalysisError(f"unexpected analysis payload type {type(payload).__name__}")

    text = _CODE_FENCE.sub("", payload).strip()
    try:
        decoded = json.loads(text)
    except json.JSONDecodeError as e:
        raise AnalysisError(f"analysis response is not valid JSON: {e}") from e
    if not isinstance(decoded, dict):
        raise AnalysisError("analysis response is not a JSON object")
    return decoded


class AnalysisStage:
    """Requests schema-constrained tags for indexed videos."""

    def __init__(self, client: VideoIndexClient, config: IngestConfig):
        self.client = client
        self.prompt = config.analysis_prompt
        self.temperature = config.analysis_temperature
        self.timeout = config.analysis_timeout
        self.logger = logging.getLogger("analysis")

    @log_function(logger_name="analysis", log_execution_time=True)
    def analyze(self, asset_id: str) -> AnalysisResult:
        """Return tags for an indexed video, or an empty result on any failure."""
        print("  Analyzing...")
        try:
            payload = self.client.analyze(
                asset_id,
                prompt=self.prompt,
                response_format=ANALYSIS_SCHEMA,
                temperature=self.temperature,
                timeout=self.timeout,
            )
            result = AnalysisResult.from_mapping(parse_analysis_payload(payload))
        except (IndexServiceError, AnalysisError) as e:
            self.logger.warning(f"Analysis failed for {asset_id}, continuing without tags: {e}")
            print(f"  Analysis failed (continuing without tags): {e}")
            return AnalysisResult()

        self.logger.info(f"Analysis for {asset_id}: {result.as_dict()}")
        print(f"  Tags: {json.dumps(result.as_dict())}")
        return result
