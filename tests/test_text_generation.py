from types import SimpleNamespace
from unittest.mock import AsyncMock

import openai
import pytest

from news_pipeline.models.schemas import DEFAULT_TAGS
from news_pipeline.services import offline
from news_pipeline.services.text_generation import build_text_generator, parse_relevance, parse_tags


def _fake_llm(*contents):
    llm = AsyncMock()
    llm.ainvoke.side_effect = [SimpleNamespace(content=content) for content in contents]
    return llm


def test_parse_tags_accepts_fenced_json():
    assert parse_tags('```json\n["#Energy", "#Kenya"]\n```') == ["#Energy", "#Kenya"]


@pytest.mark.parametrize("text", ["not json", '{"tags": ["#A"]}', "[]", '["", "  "]'])
def test_parse_tags_falls_back_to_defaults(text):
    assert parse_tags(text) == DEFAULT_TAGS


def test_invalid_tag_json_is_logged_by_module_logger(caplog):
    with caplog.at_level("WARNING", logger="news_pipeline.services.text_generation"):
        parse_tags("not json")

    assert [record.name for record in caplog.records] == ["news_pipeline.services.text_generation"]


@pytest.mark.parametrize("text,expected", [
    ("0.92", 0.92),
    ("0.8 - strong regional focus", 0.8),
    ("1.7", 1.0),
    ("-0.3", 0.0),
    ("high", 0.7),
    ("", 0.7),
])
def test_parse_relevance(text, expected):
    assert parse_relevance(text) == pytest.approx(expected)


@pytest.mark.asyncio
async def test_remote_model_is_used_when_present(settings):
    llm = _fake_llm("  Kenya opens a geothermal plant.  ", '["#Kenya", "#Geothermal"]', "0.9")
    generator = build_text_generator(settings, llm=llm)

    assert generator.has_remote_model
    assert await generator.generate_summary("Kenya power", "body") == "Kenya opens a geothermal plant."
    assert await generator.generate_tags("Kenya power", "body") == ["#Kenya", "#Geothermal"]
    assert await generator.calculate_relevance_score("Kenya power", "body") == pytest.approx(0.9)

    _, kwargs = llm.ainvoke.call_args_list[0]
    assert kwargs["max_tokens"] == 200


@pytest.mark.asyncio
async def test_prompt_truncates_body(settings):
    llm = _fake_llm("ok")
    generator = build_text_generator(settings, llm=llm)

    await generator.generate_media_justification("Title", "x" * 1000, "image and video")

    prompt = llm.ainvoke.call_args.args[0]
    assert "x" * 300 in prompt
    assert "x" * 301 not in prompt
    assert "image and video" in prompt


@pytest.mark.asyncio
async def test_model_failure_uses_offline_text(settings):
    llm = AsyncMock()
    llm.ainvoke.side_effect = openai.OpenAIError("rate limited")
    generator = build_text_generator(settings, llm=llm)

    summary = await generator.generate_summary("Solar farms expand", "New renewable capacity")

    assert summary == offline.MOCK_SUMMARIES[offline.ENERGY]


@pytest.mark.asyncio
async def test_empty_completion_uses_offline_text(settings):
    generator = build_text_generator(settings, llm=_fake_llm("   "))

    tags = await generator.generate_tags("China trade dispute", "tariffs")

    assert tags == offline.MOCK_TAGS[offline.CHINA_TRADE]


@pytest.mark.asyncio
async def test_without_key_everything_is_offline(settings):
    generator = build_text_generator(settings)

    assert not generator.has_remote_model
    assert await generator.calculate_relevance_score("Kenya", "East Africa") == pytest.approx(0.85)
    assert await generator.generate_wikipedia_snippet("Solar Power") == offline.MOCK_SNIPPETS["solar power"]
