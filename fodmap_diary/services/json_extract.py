"""Recover a JSON object embedded in free-form LLM output."""

import json

from fodmap_diary.exceptions import EmptyInputError, NoJsonFoundError


def extract_json(text: str) -> dict:
    """
    Return the first balanced ``{...}`` region of ``text`` that parses as JSON.

    Tolerates prose, markdown fences and tool-call residue around the object.
    Braces inside JSON strings are not tracked, so a candidate confused by
    them simply fails to parse and scanning resumes after it.

    Raises:
        EmptyInputError: ``text`` is empty
        NoJsonFoundError: no candidate region parses
    """
    if not text:
        raise EmptyInputError("Empty response from LLM")

    depth = 0
    start = -1

    for i, char in enumerate(text):
        if char == "{":
            if depth == 0:
                start = i
            depth += 1
        elif char == "}" and depth > 0:
            depth -= 1
            if depth == 0:
                try:
                    return json.loads(text[start : i + 1])
                except json.JSONDecodeError:
                    start = -1

    raise NoJsonFoundError("No valid JSON found in response")
