# competitor_email/features/email_generation/prompts.py
"""
Prompt construction for competitor emails.

Pure functions: no I/O, no logging.
"""

from typing import Iterable

from competitor_email.db.models import KnowledgeChunk, SignalsRecord

BODY_SYSTEM_PROMPT = (
    "You are an expert at writing brief, human-sounding B2B emails "
    "that convert without being salesy."
)

COMPLIANCE_KEYWORDS = ("iso", "certification")


def extract_compliance_evidence(chunks: Iterable[KnowledgeChunk]) -> str:
    """
    Join the content of every chunk mentioning "iso" or "certification"
    (case-insensitive), one chunk per line. Empty string if none match.
    """
    return "\n".join(
        chunk.content
        for chunk in chunks
        if any(keyword in chunk.content.lower() for keyword in COMPLIANCE_KEYWORDS)
    )


def build_body_prompt(
    signals: SignalsRecord,
    chunks: Iterable[KnowledgeChunk],
    competitor_id: str,
    org_id: str,
) -> str:
    compliance_evidence = extract_compliance_evidence(chunks)

    sections = [
        f"You are writing a brief, persuasive email to customers of {competitor_id} "
        f"on behalf of {org_id}.",
        "COMPETITOR INTELLIGENCE:\n"
        f"- Compliance mentions: {signals.compliance_mentions}\n"
        f"- Pricing mentions: {signals.pricing_mentions}\n"
        f"- Product mentions: {signals.product_mentions}",
    ]

    # The advantages section only exists when there is evidence to ground it
    if compliance_evidence:
        sections.append(f"OUR ADVANTAGES:\n{compliance_evidence}")

    sections.append(
        "Write a SHORT (max 150 words), human, conversational email that:\n"
        f"1. Opens with empathy (acknowledge they're using {competitor_id})\n"
        "2. Highlights ONE key differentiator (focus on security/compliance if available)\n"
        "3. Includes a soft call-to-action\n"
        "4. Sounds like a real person, not marketing copy\n"
        "5. No subject line - just the email body\n"
        '6. Use "we" not company name\n'
        "7. Be specific but humble"
    )
    sections.append(
        "Tone: Friendly, helpful, not pushy. Like a colleague recommending a better tool."
    )
    return "\n\n".join(sections)


def build_subject_prompt(email_body: str) -> str:
    return (
        "Write a 4-6 word email subject line for this email body "
        f"(no quotes, no punctuation):\n\n{email_body}"
    )
