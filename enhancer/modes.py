"""
Mode Registry
=============

Static mapping from an enhancement mode to the system instruction that
steers the upstream model's rewrite.

Invariants:
- Exactly one template per Mode member, built once at import
- Templates are frozen; nothing writes to the registry after startup
- lookup() is total over Mode; anything else is a programming error
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping


class Mode(str, Enum):
    """Canonical enhancement modes."""

    DEEP_RESEARCH = "deep-research"
    THINK_MODE = "think-mode"
    QUICK_REFINE = "quick-refine"


@dataclass(frozen=True)
class ModeTemplate:
    """System instruction plus display metadata for one mode."""

    mode: Mode
    system_instruction: str
    display_name: str
    description: str
    timeout_s: float  # upper bound for the single upstream call


# ── Behavioral Contracts ──────────────────────────────────────────────────────

_DEEP_RESEARCH_INSTRUCTION = """You are a research prompt architect. Rewrite the user's prompt so an AI assistant will investigate it broadly and rigorously:
1. State the core research question and its scope explicitly
2. Ask for multiple perspectives, sources, and lines of evidence
3. Request comparisons, trade-offs, and points of disagreement between sources
4. Ask for recent developments and clearly flagged uncertainty
5. Specify a structured output (summary, key findings, open questions)

Preserve the user's original intent. Return only the rewritten prompt, with no preamble."""

_THINK_MODE_INSTRUCTION = """You are an advanced prompt enhancement expert. Rewrite the user's prompt so an AI assistant will reason through it step by step:
1. Break the problem into ordered sub-questions
2. Ask the assistant to state its assumptions before answering
3. Request explicit intermediate reasoning for each step
4. Ask it to consider edge cases and alternative approaches
5. Require a clearly marked final answer after the reasoning

Preserve the user's original intent. Return only the rewritten prompt, with no preamble."""

_QUICK_REFINE_INSTRUCTION = """You are a prompt enhancement expert. Rewrite the user's prompt to be:
1. Clearer and more specific
2. More likely to produce a helpful response
3. Concise but comprehensive
4. Well-structured and easy to understand

Focus on improving clarity and specificity while maintaining the original intent. Return only the rewritten prompt, with no preamble."""


_TEMPLATES: Mapping[Mode, ModeTemplate] = MappingProxyType({
    Mode.DEEP_RESEARCH: ModeTemplate(
        mode=Mode.DEEP_RESEARCH,
        system_instruction=_DEEP_RESEARCH_INSTRUCTION,
        display_name="Deep Research",
        description="Broad multi-source research framing with structured findings",
        timeout_s=45.0,
    ),
    Mode.THINK_MODE: ModeTemplate(
        mode=Mode.THINK_MODE,
        system_instruction=_THINK_MODE_INSTRUCTION,
        display_name="Think Mode",
        description="Explicit step-by-step reasoning framing",
        timeout_s=45.0,
    ),
    Mode.QUICK_REFINE: ModeTemplate(
        mode=Mode.QUICK_REFINE,
        system_instruction=_QUICK_REFINE_INSTRUCTION,
        display_name="Quick Refine",
        description="Concise clarity and specificity improvements",
        timeout_s=30.0,
    ),
})


def lookup(mode: Mode) -> ModeTemplate:
    """
    Return the template for a canonical mode.

    Raises:
        KeyError: mode is not a Mode member (validation should have caught it)
    """
    try:
        return _TEMPLATES[Mode(mode)]
    except ValueError:
        raise KeyError(mode) from None


def all_templates() -> List[ModeTemplate]:
    """All templates in declaration order."""
    return [_TEMPLATES[mode] for mode in Mode]


def describe_modes() -> List[Dict[str, str]]:
    """Public description of supported modes for the service root."""
    return [
        {
            "mode": template.mode.value,
            "displayName": template.display_name,
            "description": template.description,
        }
        for template in all_templates()
    ]
