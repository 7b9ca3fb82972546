from __future__ import annotations

import pytest

from src.errors import AnalysisError
from src.index import IndexServiceError
from src.pipeline import ANALYSIS_SCHEMA, AnalysisResult, AnalysisStage, parse_analysis_payload
from tests.fakes import FakeIndexClient


def test_parse_payload_accepts_objects() -> None:
    assert parse_analysis_payload({"theme": "Humor"}) == {"theme": "Humor"}


def test_parse_payload_strips_code_fences() -> None:
    payload = '```json\n{"theme": "Humor", "sentiment": "Positive"}\n```'

    assert parse_analysis_payload(payload) == {"theme": "Humor", "sentiment": "Positive"}


@pytest.mark.parametrize("payload", [None, "", "not json", "[1, 2]", 42])
def test_parse_payload_rejects_unusable_responses(payload) -> None:
    with pytest.raises(AnalysisError):
        parse_analysis_payload(payload)


def test_result_keeps_schema_fields_only() -> None:
    result = AnalysisResult.from_mapping(
        {
            "theme": " Humor ",
            "celebrities": ["Tom Brady", "", "Serena Williams"],
            "emotion": "",
            "unexpected": "ignored",
        }
    )

    assert result.as_dict() == {"theme": "Humor", "celebrities": "Tom Brady, Serena Williams"}


def test_schema_covers_every_result_field() -> None:
    properties = ANALYSIS_SCHEMA["json_schema"]["properties"]

    assert set(properties) == set(AnalysisResult().__dataclass_fields__)


def test_analyze_returns_tags(config) -> None:
    client = FakeIndexClient(analysis='{"theme": "Humor", "era_decade": "2020s"}')

    result = AnalysisStage(client, config).analyze("vid-1")

    assert result == AnalysisResult(theme="Humor", era_decade="2020s")


def test_analyze_degrades_on_remote_error(config) -> None:
    client = FakeIndexClient()
    client.analyze_error = IndexServiceError("rate limited", status_code=429)

    result = AnalysisStage(client, config).analyze("vid-1")

    assert result.is_empty


def test_analyze_degrades_on_malformed_response(config) -> None:
    client = FakeIndexClient(analysis="Sure! Here are the tags: theme=Humor")

    assert AnalysisStage(client, config).analyze("vid-1").is_empty
