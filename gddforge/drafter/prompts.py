"""Prompt templates for section generation, enhancement and inline completion."""

from __future__ import annotations

from gddforge.catalog import get_section
from gddforge.config.models import GenerationPolicy
from gddforge.drafter.context import build_filled_content_context
from gddforge.drafter.models import AllSectionsContent, EnhanceAction, GameContext

SECTION_SYSTEM_PROMPTS: dict[str, str] = {
    "overview": """\
You are an expert game design document writer. You help game developers write \
compelling and professional game design documents.
Your responses should be:
- Concise and to the point
- Professional yet engaging
- Specific to game development terminology
- Focused on the game's unique selling points""",
    "game_concept": """\
You are an expert game designer helping to articulate game concepts clearly.
Focus on:
- Core gameplay loop
- Unique mechanics
- Player experience
- Genre conventions and innovations""",
    "storyline": """\
You are a narrative designer helping craft compelling game stories.
Focus on:
- Engaging plot hooks
- Character motivations
- World-building elements
- Narrative pacing""",
    "gameplay_mechanics": """\
You are a game mechanics expert helping document gameplay systems.
Focus on:
- Clear mechanic descriptions
- Player interactions
- Balance considerations
- Progression systems""",
}

GENERATION_SYSTEM_PROMPT = """\
You are an expert game design document writer with deep knowledge of game \
development, design principles, and industry standards.

Your role is to help game developers create professional, comprehensive game \
design documents. You write content that is:
- Specific and detailed, not generic
- Consistent with established game details
- Professional yet engaging
- Actionable for development teams
- Well-structured and clear

When generating content, you carefully consider all provided context about the \
game and ensure your writing aligns with the established vision, tone, and details."""

ENHANCEMENT_PROMPTS: dict[str, str] = {
    "enhance": (
        "Improve this text to be more professional, engaging, and well-structured "
        "while maintaining the original meaning and intent. Fix any grammar issues "
        "and improve clarity."
    ),
    "improve": (
        "Refine this text to be clearer and more impactful. Improve word choice, "
        "sentence structure, and flow while keeping the same general content."
    ),
    "expand": (
        "Expand this text with more detail and depth. Add relevant examples, "
        "explanations, or supporting points while maintaining the same tone and style."
    ),
    "concise": (
        "Make this text more concise and punchy. Remove unnecessary words, combine "
        "sentences where appropriate, and get to the point faster while preserving "
        "key information."
    ),
}

_GENERATION_GUIDELINES = """\
## Important Guidelines
- Write EXACTLY 2 paragraphs, no more (up to 4 ONLY IF specifically instructed to)
- Each paragraph should be separated by a blank line
- Write professional, specific content tailored to THIS game
- Reference and build upon the existing content above for consistency
- Use concrete details, not generic placeholder text
- Write in a clear, professional tone suitable for a game design document
- Do not repeat information that's already covered in other sections
- Focus on what's unique and specific to this subsection's purpose
- Do not use bullet points or lists - write in flowing paragraphs only

Generate the content now. Write only the content itself (2 paragraphs), no \
headers or meta-commentary."""

_DEFAULT_COMPLETION_INSTRUCTION = "Continue this text naturally and professionally."


def get_system_prompt(section_type: str) -> str:
    """Return the system prompt for a section, falling back to the overview prompt.

    Section slugs use hyphens ("game-concept"); lookup accepts either form.
    """
    key = (section_type or "").replace("-", "_")
    return SECTION_SYSTEM_PROMPTS.get(key, SECTION_SYSTEM_PROMPTS["overview"])


def format_game_info(game_context: GameContext) -> str:
    lines = [
        f"Game Name: {game_context.name}",
        f"Game Concept: {game_context.concept}",
        f"Platforms: {', '.join(game_context.platforms)}",
    ]
    if game_context.timeline:
        lines.append(f"Timeline: {game_context.timeline}")
    return "\n".join(lines)


def build_generation_prompt(
    *,
    sub_section_title: str,
    instructions: str,
    game_context: GameContext,
    all_content: AllSectionsContent,
    policy: GenerationPolicy | None = None,
) -> str:
    """Build the user prompt for drafting one subsection.

    Deterministic: the same inputs always render the same prompt.
    """
    policy = policy or GenerationPolicy()
    platforms = ", ".join(game_context.platforms) if game_context.platforms else "Not specified"
    info_lines = [
        "## Game Information",
        f"- **Name:** {game_context.name or 'Untitled Game'}",
        f"- **Concept:** {game_context.concept or 'Not specified'}",
        f"- **Platforms:** {platforms}",
    ]
    if game_context.timeline:
        info_lines.append(f"- **Timeline:** {game_context.timeline}")

    parts = [
        "You are writing content for a Game Design Document (GDD).",
        "\n".join(info_lines),
    ]

    existing = build_filled_content_context(all_content, policy)
    if existing:
        parts.append(
            "# Existing GDD Content\n"
            "Use the following already-written sections as context to ensure "
            "consistency and build upon established details:\n\n"
            f"{existing}\n\n---"
        )

    parts.append(
        "# Your Task\n"
        f'Write content for the "{sub_section_title}" subsection.\n\n'
        "## Instructions\n"
        f"{instructions.strip() or 'Write professional content for this game design document section.'}"
    )
    parts.append(_GENERATION_GUIDELINES)
    return "\n\n".join(parts)


def build_enhancement_prompt(
    action: EnhanceAction,
    text: str,
    game_context: GameContext,
) -> str:
    instruction = ENHANCEMENT_PROMPTS[action]
    return (
        f"{instruction}\n\n"
        f'Context - This is for a game called "{game_context.name}":\n'
        f"{game_context.concept}\n\n"
        f"Text to {action}:\n"
        f'"{text}"\n\n'
        "Keep paragraphs separated by a blank line, in the same order as the original.\n"
        "Provide only the improved text, nothing else."
    )


def completion_instruction(section_type: str, sub_section_type: str) -> str:
    """Per-subsection instruction for inline completion, derived from the catalog."""
    section = get_section(section_type)
    sub = section.get_subsection(sub_section_type) if section else None
    if sub is None:
        return _DEFAULT_COMPLETION_INSTRUCTION
    focus = f" {sub.description}" if sub.description else ""
    return f"Complete this {sub.title} text.{focus}"


def build_completion_prompt(
    section_type: str,
    sub_section_type: str,
    current_text: str,
    game_context: GameContext,
) -> str:
    return (
        f"{completion_instruction(section_type, sub_section_type)}\n\n"
        "Game Information:\n"
        f"{format_game_info(game_context)}\n\n"
        "Current text to complete:\n"
        f'"{current_text}"\n\n'
        "Continue the text naturally. Only provide the completion, not the original "
        "text. Keep it concise (1-2 sentences max)."
    )
