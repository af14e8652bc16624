"""Handlebars prompt rendering for the generate and translate operations."""

import json
from collections.abc import Callable
from typing import Any

import pybars

from skit_studio.models import Language, Script

_compiler = pybars.Compiler()
_cache: dict[str, Callable] = {}


class PromptError(Exception):
    """Raised when a Handlebars template fails to compile or render."""


# ── Language styles ──────────────────────────────────────

LANGUAGE_STYLES: dict[Language, str] = {
    Language.Hinglish: (
        "Hinglish: conversational Hindi mixed with English, written entirely "
        "in Roman script, the way friends text each other in Delhi or Mumbai."
    ),
    Language.Hindi: (
        "Hindi: everyday spoken Hindi written in Devanagari script. Keep "
        "English loanwords only where a Hindi speaker would naturally use them."
    ),
    Language.Bangla: (
        "Bangla: colloquial Bengali written in Bengali script, with the "
        "warmth and wordplay of Kolkata adda banter."
    ),
}

SCRIPT_JSON_SHAPE = (
    '{"title": "<short catchy title>", '
    '"characters": "<comma separated character names with a few words each>", '
    '"sceneSetup": "<one or two sentences setting the scene>", '
    '"script": [{"character": "<name>", "line": "<what they say>"}], '
    '"punchline": "<the closing punchline>"}'
)


# ── Default templates ────────────────────────────────────

DEFAULT_GENERATE_PROMPT = """\
You are a stand-up comedy writer who writes short sketches for Indian audiences.

Write a short, funny dialogue script about: {{{topic}}}

Language style: {{{style}}}

Rules:
- Two to four characters, six to twelve lines of dialogue.
- Keep it light, family friendly and build up to a punchline.
- Character names stay consistent between "characters" and "script".

Return only JSON with exactly this shape, no markdown, no other text:
{{{shape}}}
"""

DEFAULT_TRANSLATE_PROMPT = """\
You translate comedy scripts while keeping the jokes funny.

Translate the script below into {{language}}.
Language style: {{{style}}}

Rules:
- Keep the same number of dialogue lines in the same order.
- Keep character names, but write them in the target script.
- Adapt wordplay so it still lands; do not translate literally.

Script:
{{{script_json}}}

Return only JSON with exactly this shape, no markdown, no other text:
{{{shape}}}
"""


def render_prompt(template_str: str, context: dict[str, Any]) -> str:
    """Compile and render a Handlebars template with the given context.

    Templates are cached by source string to avoid recompilation.
    """
    try:
        compiled = _cache.get(template_str)
        if compiled is None:
            compiled = _compiler.compile(template_str)
            _cache[template_str] = compiled
        return str(compiled(context))
    except Exception as e:
        raise PromptError(f"Template error: {e}") from e


def generate_context(topic: str, language: Language) -> dict[str, Any]:
    """Template variables for the generate prompt."""
    return {
        "topic": topic.strip(),
        "language": language.value,
        "style": LANGUAGE_STYLES[language],
        "shape": SCRIPT_JSON_SHAPE,
    }


def translate_context(script: Script, target: Language) -> dict[str, Any]:
    """Template variables for the translate prompt."""
    return {
        "language": target.value,
        "style": LANGUAGE_STYLES[target],
        "script_json": json.dumps(script.to_wire(), ensure_ascii=False, indent=2),
        "shape": SCRIPT_JSON_SHAPE,
    }
