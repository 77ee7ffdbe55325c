"""
Matching Prompts
Prompt sent to the relevance scorer
"""
from typing import List, Optional

from app.modules.matching.types import GemForMatching, LearnedThought


MATCHING_SYSTEM_PROMPT = """You are a wisdom matching assistant. Given a user's upcoming moment/situation and their collection of saved insights (gems), identify which gems are most relevant.

MOMENT: {moment_description}
{learned_section}
USER'S GEMS:
{gems_list}

For each gem, consider:
1. Direct topical relevance (does the gem's advice apply to this situation?)
2. Context tag match (e.g., "meetings" tag for a meeting moment)
3. Underlying principles (even if not directly mentioned, could this wisdom help?)

Return a JSON object with the relevant gems (max 5, minimum relevance 0.5):
{{
  "matches": [
    {{
      "gem_id": "uuid",
      "relevance_score": 0.85,
      "relevance_reason": "Brief explanation of why this gem applies..."
    }}
  ]
}}

If no gems are relevant, return {{"matches": []}}
Respond with ONLY the JSON, no additional text."""


LEARNED_SECTION_TEMPLATE = """
PREVIOUSLY HELPFUL FOR SIMILAR SITUATIONS (the user marked these helpful before; favour them when they fit):
{learned_list}
"""


def formatGemsForPrompt(gems: List[GemForMatching]) -> str:
    """Numbered candidate list: index, id, content, context tag, optional source"""
    blocks = []
    for index, gem in enumerate(gems, 1):
        source = f" (Source: {gem.source})" if gem.source else ""
        blocks.append(
            f"[{index}] ID: {gem.id}\n"
            f"Content: \"{gem.content}\"\n"
            f"Context: {gem.context_tag}{source}"
        )
    return "\n\n".join(blocks)


def formatLearnedThoughts(learnedThoughts: Optional[List[LearnedThought]]) -> str:
    """Hint section, empty string when there is nothing learned yet"""
    if not learnedThoughts:
        return ""

    lines = [
        f"- ID: {thought.gem_id} (confidence {round(thought.confidence_score * 100)}%): \"{thought.gem_content}\""
        for thought in learnedThoughts
    ]
    return LEARNED_SECTION_TEMPLATE.format(learned_list="\n".join(lines))


def buildMatchingPrompt(
    momentDescription: str,
    gems: List[GemForMatching],
    learnedThoughts: Optional[List[LearnedThought]] = None
) -> str:
    return MATCHING_SYSTEM_PROMPT.format(
        moment_description=momentDescription,
        learned_section=formatLearnedThoughts(learnedThoughts),
        gems_list=formatGemsForPrompt(gems),
    )
