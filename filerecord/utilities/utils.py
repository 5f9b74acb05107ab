"""
filerecord Shared Utilities — naming helpers used by decorators and helpers.
"""

from __future__ import annotations

import re


def to_snake(name: str) -> str:
    """
    Convert CamelCase (or PascalCase) to snake_case.

    Examples:
        to_snake("RubyScript")       → "ruby_script"
        to_snake("HTMLPage")         → "html_page"
        to_snake("scripts")          → "scripts"
    """
    s1 = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", name)
    return re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", s1).lower()


def tableize(name: str) -> str:
    """
    Snake-case plural used for default directories and URL controllers.

    Examples:
        tableize("RubyScript")       → "ruby_scripts"
        tableize("Category")         → "categories"
        tableize("Box")              → "boxes"
        tableize("Notes")            → "notes"
    """
    snake = to_snake(name)
    if snake.endswith(("ss", "sh", "ch", "x", "z")):
        return snake + "es"
    if snake.endswith("y") and snake[-2:-1] not in ("a", "e", "i", "o", "u", ""):
        return snake[:-1] + "ies"
    if snake.endswith("s"):
        return snake
    return snake + "s"
