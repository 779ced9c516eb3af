"""Unit tests for outreach/pipeline/types.py and tones.py"""

import pytest
from pydantic import ValidationError

from outreach.pipeline.tones import DEFAULT_TONE, WritingTone
from outreach.pipeline.types import Claim, ComposedMessages, PipelineRequest, Source, VerifiedDoc


class TestVerifiedDoc:
    def test_drops_points_without_source_url(self):
        """Should keep only claims with a non-empty source URL."""
        doc = VerifiedDoc(
            points=[
                Claim(claim="Sourced", source=Source(title="TC", url="https://tc.com/a")),
                Claim(claim="Title only", source=Source(title="TC", url="  ")),
                Claim(claim="No source"),
                Claim(claim="  ", source=Source(url="https://tc.com/b")),
            ]
        )
        assert [p.claim for p in doc.points] == ["Sourced"]

    def test_validates_from_dict(self):
        doc = VerifiedDoc.model_validate({"summary": "Acme", "points": [{"claim": "x"}]})
        assert doc.points == []


class TestComposedMessages:
    def test_subject_line_extracted(self):
        messages = ComposedMessages(email="Subject: Platform scale at Acme\n\nHi Jane,\n\nBody")
        assert messages.subject_line("Acme") == "Platform scale at Acme"
        assert messages.body() == "Hi Jane,\n\nBody"

    def test_subject_is_case_insensitive(self):
        assert ComposedMessages(email="SUBJECT: Hello\nBody").subject_line("Acme") == "Hello"

    def test_subject_fallback(self):
        """Should fall back to a generic subject when the email has none."""
        assert ComposedMessages(email="Hi Jane, quick note").subject_line("Acme") == "Outreach to Acme"


class TestPipelineRequest:
    def test_strips_and_defaults(self):
        request = PipelineRequest(company=" Acme ", role=" CTO ", highlights=" Scaled ", domain="  ")
        assert request.company == "Acme"
        assert request.role == "CTO"
        assert request.domain is None
        assert request.resume_context is None
        assert request.tone == DEFAULT_TONE

    @pytest.mark.parametrize("field", ["company", "role", "highlights"])
    def test_blank_required_field_rejected(self, field):
        values = {"company": "Acme", "role": "CTO", "highlights": "Scaled"}
        values[field] = "   "
        with pytest.raises(ValidationError):
            PipelineRequest(**values)

    def test_is_immutable(self, acme_request):
        with pytest.raises(ValidationError):
            acme_request.company = "Other"

    def test_tone_parsed(self):
        request = PipelineRequest(company="Acme", role="CTO", highlights="x", tone="Casual")
        assert request.tone == WritingTone.CASUAL


class TestWritingTone:
    @pytest.mark.parametrize("value", [None, "", "sarcastic", 3])
    def test_unknown_tone_is_formal(self, value):
        assert WritingTone.parse(value) == WritingTone.FORMAL

    def test_every_tone_has_instruction(self):
        for tone in WritingTone:
            assert tone.style_instruction
