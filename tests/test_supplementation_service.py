"""
Revisio Backend — Supplementation Stage Unit Tests (Mocked LLM)
================================================================

What we test:
    ✅ Valid output is returned as Markdown, verbatim when clean
    ✅ Prompt carries topic, headings and language name
    ✅ Leaked structured-data fragments are sanitized away
    ✅ Missing or non-string supplementedPoints → schema_violation
    ✅ Remote failure → upstream_failure with a visible error heading
"""

import json

import pytest

from revisio.exceptions import LLMServiceError
from revisio.schemas.revision import SupplementationRequest
from revisio.services.supplementation_service import SupplementationService


PHOTOSYNTHESIS_MD = (
    "## Photosynthesis\n\n"
    "Photosynthesis is the process by which green plants convert light energy "
    "into chemical energy.\n\n"
    "**Key Components involved:**\n"
    "- **Sunlight:** Provides the energy.\n"
    "- **Chlorophyll:** Absorbs light."
)


def supplemented(markdown):
    return json.dumps({"supplementedPoints": markdown})


class TestSupplementationService:

    def setup_method(self):
        self.request = SupplementationRequest(
            topic="Biology",
            revision_points="## Photosynthesis",
            language="en",
        )

    @pytest.mark.asyncio
    async def test_supplement_success_is_verbatim(self, mock_llm):
        mock_llm.generate_json.return_value = supplemented(PHOTOSYNTHESIS_MD)
        service = SupplementationService(llm=mock_llm)

        outcome = await service.supplement(self.request)

        assert outcome.ok
        assert outcome.markdown == PHOTOSYNTHESIS_MD
        assert outcome.to_response().supplemented_points == PHOTOSYNTHESIS_MD

    @pytest.mark.asyncio
    async def test_prompt_carries_topic_headings_and_language(self, mock_llm):
        mock_llm.generate_json.return_value = supplemented("## Zelle\n\nText")
        service = SupplementationService(llm=mock_llm)

        await service.supplement(
            SupplementationRequest(
                topic="Zellbiologie",
                revision_points="## Zelle\n\n## Mitose",
                language="de",
            )
        )

        parts, schema = mock_llm.generate_json.await_args.args
        assert len(parts) == 1
        prompt = parts[0]
        assert "Zellbiologie" in prompt
        assert "## Zelle\n\n## Mitose" in prompt
        assert "German (de)" in prompt
        assert "supplementedPoints" in schema.__annotations__

    @pytest.mark.asyncio
    async def test_leaked_fragments_are_sanitized(self, mock_llm):
        leaky = '[{"topic": "Biology", "points": [{"point": "## Cells\n\nCells are the basic unit of life."}]}]'
        mock_llm.generate_json.return_value = supplemented(leaky)
        service = SupplementationService(llm=mock_llm)

        outcome = await service.supplement(self.request)

        assert outcome.ok
        assert outcome.markdown == "## Cells\n\nCells are the basic unit of life."

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "raw",
        [
            '{"supplementedPoints": 42}',
            '{"supplementedPoints": ["## A"]}',
            '{"markdown": "## A"}',
            "## Photosynthesis without any JSON",
        ],
        ids=["number", "list", "wrong-key", "not-json"],
    )
    async def test_malformed_output_is_a_schema_violation(self, mock_llm, raw):
        mock_llm.generate_json.return_value = raw
        service = SupplementationService(llm=mock_llm)

        outcome = await service.supplement(self.request)

        assert not outcome.ok
        assert outcome.failure.kind == "schema_violation"
        text = outcome.to_response().supplemented_points
        assert text.startswith("## Generation Error\n\n")
        assert raw in text

    @pytest.mark.asyncio
    async def test_upstream_failure_renders_error_heading(self, mock_llm):
        mock_llm.generate_json.side_effect = LLMServiceError(message="Deadline exceeded")
        service = SupplementationService(llm=mock_llm)

        outcome = await service.supplement(self.request)

        assert outcome.failure.kind == "upstream_failure"
        text = outcome.to_response().supplemented_points
        assert text.startswith("## Critical Internal System Error\n\n")
        assert "Deadline exceeded" in text
        assert text.endswith("Please check the server logs and try again later.")

    @pytest.mark.asyncio
    async def test_upstream_failure_is_localized(self, mock_llm):
        mock_llm.generate_json.side_effect = LLMServiceError(message="")
        service = SupplementationService(llm=mock_llm)

        outcome = await service.supplement(
            SupplementationRequest(topic="Biologie", revision_points="## Cellule", language="fr")
        )

        text = outcome.to_response().supplemented_points
        assert text.startswith("## Erreur Interne Critique du Système")
        assert "Erreur inconnue" in text

    def test_prompt_insists_on_clean_emphasis(self):
        service = SupplementationService(llm=None)

        prompt = service.build_prompt(self.request)[0]

        assert "**Importance:**" in prompt
        assert "Forms the base of most food chains" in prompt
        assert "**Critically, ensure that Markdown emphasis" in prompt
        assert prompt.index("**Critically") < prompt.index("Begin generating")
