"""Prompt construction for grounded positioning generation."""

from positioning_rag.entities import CoreMessaging, ReferenceExample, ScoredExample

BANNED_PHRASES = ("say goodbye", "transform", "unlock")

RESPONSE_CONTRACT = """Format your response exactly like this:
HEADLINE: [primary anchor] for [secondary anchor] [ICP target] (natural phrasing, no extra details)
SUBHEADLINE: [concise problem + solution in 1-2 sentences]
OPPORTUNITY: [market opportunity statement referencing specific segments]"""


def render_example(example: ReferenceExample) -> str:
    return (
        f'{example.company} ({example.anchor_type.value}): "{example.tagline}"\n'
        f"ICP: {', '.join(example.icp)}\n"
        f"Problem: {example.problem}\n"
        f"Solution: {example.differentiator}\n"
        f"Structure: {example.structure}"
    )


def build_context(examples: list[ScoredExample]) -> str:
    """Render retrieved examples into the context block, blank-line separated."""
    return "\n\n".join(render_example(scored.example) for scored in examples)


def build_prompt(messaging: CoreMessaging, context: str) -> str:
    """Build the final generation prompt.

    Layout: context block, the request's literal field values, the
    positioning rules, then the strict three-line response contract.
    """
    primary = messaging.primary_anchor
    secondary = messaging.secondary_anchor
    icp = ", ".join(messaging.icp_segments)
    icp_line = f"ICP: {icp}\n" if icp else ""
    banned = ", ".join(f'"{phrase}"' for phrase in BANNED_PHRASES)
    target = f"{secondary.content} {icp}".strip()

    return f"""Based on these successful positioning examples:

{context}

Create positioning for:
Primary Anchor: {primary.content} ({primary.anchor_type})
Secondary Anchor: {secondary.content} ({secondary.anchor_type})
{icp_line}Problem: {messaging.problem}
Differentiator: {messaging.differentiator}

POSITIONING RULES - CRITICAL:
- HEADLINE must contain the exact text "{primary.content}" and position it for "{target}"
- Do NOT add extra details like employee counts or company sizes - keep it natural
- SUBHEADLINE must be concise (1-2 sentences max) combining problem + solution
- Keep the core meaning from: "{messaging.problem[:80]}..."
- And solution: "{messaging.differentiator[:80]}..."
- Ensure smooth logical flow between problem and solution
- Use proper transitions: "While X happens, Y solves it" OR "X creates problems. Y provides the solution"
- NO generic positioning language: avoid {banned}, etc.
- Focus on specific, concrete benefits

Generate professional positioning copy:

{RESPONSE_CONTRACT}"""
