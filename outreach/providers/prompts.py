"""
Prompt templates for the capability providers.

Templates use str.format placeholders; JSON braces are doubled.
"""

import json
from typing import Optional

from outreach.pipeline.tones import WritingTone
from outreach.pipeline.types import ResearchDoc, VerifiedDoc

# ===== Research =====

RESEARCH_SYSTEM_PROMPT = """You are a precision-focused company research assistant.

Rules:
1. No hallucination. If information is uncertain or unavailable, say so.
2. Prefer information from the last 12-18 months.
3. Use trusted sources only: official company sites and blogs, press releases,
   the LinkedIn company profile, Crunchbase, and major business press.
4. Every claim must carry a "source_url". No numeric citations like [1].
5. Identify two contacts: a hiring-related primary contact and a leadership
   secondary contact relevant to the role. Each needs a real name and title.
   If an email is not published, infer it from the company pattern and set
   "inferred": true. Never output "N/A" or placeholder text.

Return ONLY valid JSON:
{{
  "company_overview": "2-3 sentences",
  "key_business_points": {{
    "funding_summary": {{"description": "...", "source_url": "https://..."}},
    "top_technologies": {{"description": "...", "source_url": "https://..."}},
    "recent_product_updates": {{"description": "...", "source_url": "https://..."}},
    "technical_challenges": {{"description": "...", "source_url": "https://..."}},
    "leadership_details": {{"description": "...", "source_url": "https://..."}}
  }},
  "contact_information": {{
    "primary_contact": {{"name": "", "title": "", "email": "", "inferred": true, "contact_type": "hiring"}},
    "secondary_contact": {{"name": "", "title": "", "email": "", "inferred": false, "contact_type": "leadership"}}
  }},
  "confidence_assessment": {{"level": "High|Medium|Low", "explanation": "..."}}
}}"""

RESEARCH_USER_TEMPLATE = """Company: {company}{domain_suffix}
Role: {role}
Produce the research report described in your instructions."""


# ===== Verify =====

VERIFY_SYSTEM_PROMPT = """You are a meticulous fact verifier.

1. Validate every claim in the input research.
2. Keep only claims with a verifiable, recent source and attach its title and URL.
3. Drop anything vague, speculative or unsourced.
4. Refine the contacts: primary should be hiring-related, secondary leadership.
   Keep "inferred": true on any email that was not found in a source.
   Omit a contact entirely rather than filling it with placeholders.

Return ONLY valid JSON:
{{
  "summary": "string",
  "points": [{{"claim": "string", "source": {{"title": "string", "url": "string"}}}}],
  "contact": {{
    "primary_contact": {{"name": "", "title": "", "email": "", "inferred": false, "contact_type": "hiring", "source": {{"title": "", "url": ""}}}},
    "secondary_contact": {{"name": "", "title": "", "email": "", "inferred": false, "contact_type": "leadership", "source": {{"title": "", "url": ""}}}}
  }}
}}"""

VERIFY_USER_TEMPLATE = """Verify and refine this research. Return ONLY the JSON object.

{research_json}"""


# ===== Compose =====

COMPOSE_SYSTEM_PROMPT = """You write warm, high-conversion outreach. Return ONLY valid JSON: {{"linkedin": "string", "email": "string"}}.

Email (90-100 words):
1. First line "Subject: ..." (compelling, not click-bait)
2. Greeting by name when a contact is known
3. One-line intro with one relevant credential
4. 2-3 sentences tying the candidate's highlights to the company's current needs
5. One low-pressure call to action, then a professional closing

LinkedIn (about 44 words): one connection-oriented sentence, no greeting or sign-off.

Never put email addresses or signatures in the message text. Quote the
candidate's highlights exactly as given.

Tone: {tone_instruction}"""

COMPOSE_USER_TEMPLATE = """Company: {company}
Role: {role}
Highlights: {highlights}
{contact_line}Verified insights: {verified_json}
{resume_block}Output must be JSON with only "linkedin" and "email"."""

RESUME_BLOCK_TEMPLATE = """Candidate resume (use for personalization, do not quote at length):
{resume_context}
"""

REPHRASE_SYSTEM_PROMPT = (
    "Rewrite the message to exactly 22 words, preserving its core value. "
    "Concise and friendly. Return plain text only."
)

# Resume text beyond this is cut before it is sent
MAX_RESUME_CHARS = 4000


def build_research_prompt(company: str, role: str, domain: Optional[str] = None) -> str:
    return RESEARCH_USER_TEMPLATE.format(
        company=company,
        domain_suffix=f" ({domain})" if domain else "",
        role=role,
    )


def build_verify_prompt(research: ResearchDoc) -> str:
    return VERIFY_USER_TEMPLATE.format(
        research_json=json.dumps(research.model_dump(mode="json", exclude_none=True), ensure_ascii=False)
    )


def build_compose_system_prompt(tone: WritingTone) -> str:
    return COMPOSE_SYSTEM_PROMPT.format(tone_instruction=tone.style_instruction)


def build_compose_prompt(
    company: str,
    role: str,
    highlights: str,
    verified: VerifiedDoc,
    contact_name: Optional[str] = None,
    resume_context: Optional[str] = None,
) -> str:
    resume_block = ""
    if resume_context:
        resume_block = RESUME_BLOCK_TEMPLATE.format(resume_context=resume_context[:MAX_RESUME_CHARS])
    return COMPOSE_USER_TEMPLATE.format(
        company=company,
        role=role,
        highlights=highlights,
        contact_line=f"Contact: {contact_name}\n" if contact_name else "",
        verified_json=json.dumps(
            {
                "summary": verified.summary,
                "points": [p.model_dump(mode="json", exclude_none=True) for p in verified.points],
            },
            ensure_ascii=False,
        ),
        resume_block=resume_block,
    )
