"""
Retry Prompt Escalation

Builds the prompt for each extraction attempt. The first attempt sends the
base prompt untouched; later attempts prepend an increasingly forceful
"JSON only" directive and quote the previous failure so the model can correct
itself.
"""

from typing import Callable, List, Optional

PromptBuilder = Callable[[], str]
AttemptPromptBuilder = Callable[[int, Optional[str]], str]

# Ordered by severity; the last one repeats for every further attempt
RETRY_DIRECTIVES: List[str] = [
    "IMPORTANT: Reply with valid JSON only{null_clause}. No explanations, no markdown, no code fences.",
    "STRICT: Return ONLY a single valid JSON value{null_clause}. Nothing may appear before or after it.",
    "FINAL ATTEMPT: Output pure JSON{null_clause} and nothing else. Any surrounding text, ```json fences or comments make the answer unusable.",
]

NULL_CLAUSE = " or the literal null"


def build_retry_prompt(
    base_builder: PromptBuilder,
    attempt: int,
    previous_error: Optional[str] = None,
    allow_null: bool = False,
) -> str:
    """
    Build the prompt for a given attempt.

    Args:
        base_builder: Zero-argument callable returning the base prompt
        attempt: 1-based attempt number
        previous_error: Failure reason recorded for the previous attempt
        allow_null: Whether the directive should also permit a literal null

    Returns:
        The base prompt verbatim for attempt 1, otherwise directive, quoted
        previous error (when given) and base prompt separated by blank lines
    """
    base_prompt = base_builder()
    if attempt <= 1:
        return base_prompt

    level = min(attempt - 2, len(RETRY_DIRECTIVES) - 1)
    directive = RETRY_DIRECTIVES[level].format(null_clause=NULL_CLAUSE if allow_null else "")

    sections = [directive]
    if previous_error:
        sections.append(f'Previous response was invalid: "{previous_error}"')
    sections.append(base_prompt)
    return "\n\n".join(sections)


def create_retry_prompt_builder(base_builder: PromptBuilder, allow_null: bool = False) -> AttemptPromptBuilder:
    """Bind a base prompt builder into an (attempt, previous_error) -> prompt callable."""

    def builder(attempt: int, previous_error: Optional[str] = None) -> str:
        return build_retry_prompt(base_builder, attempt, previous_error, allow_null)

    return builder
