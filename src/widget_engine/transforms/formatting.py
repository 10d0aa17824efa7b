from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import Any

from widget_engine.config import ConditionalFormatRule
from widget_engine.transforms.series import to_number

RED_BG, RED_TEXT = "#ffcdd2", "#c62828"
GREEN_BG, GREEN_TEXT = "#c8e6c9", "#2e7d32"
YELLOW_BG, YELLOW_TEXT = "#fff9c4", "#f9a825"


def evaluate_rule(value: Any, rule: ConditionalFormatRule) -> bool:
    number = to_number(value)
    if number is None:
        return False
    if rule.condition == "between":
        if not isinstance(rule.value, tuple):
            return False
        low, high = rule.value
        return low <= number <= high
    if isinstance(rule.value, tuple):
        return False
    threshold = float(rule.value)
    if rule.condition == "gt":
        return number > threshold
    if rule.condition == "lt":
        return number < threshold
    if rule.condition == "eq":
        return number == threshold
    if rule.condition == "gte":
        return number >= threshold
    if rule.condition == "lte":
        return number <= threshold
    return False


def evaluate_conditional_format(
    value: Any,
    rules: Sequence[ConditionalFormatRule],
) -> dict[str, str]:
    """Return colors from the first matching rule, or an empty mapping."""
    for rule in rules:
        if evaluate_rule(value, rule):
            style: dict[str, str] = {}
            if rule.background_color:
                style["background_color"] = rule.background_color
            if rule.text_color:
                style["text_color"] = rule.text_color
            return style
    return {}


def validate_rule(rule: Mapping[str, Any]) -> list[str]:
    errors: list[str] = []
    condition = rule.get("condition")
    value = rule.get("value")

    if not condition:
        errors.append("Condition is required")

    if value is None:
        errors.append("Value is required")
    elif condition == "between":
        if not isinstance(value, (list, tuple)) or len(value) != 2:
            errors.append("Between condition requires a range [min, max]")
        elif value[0] >= value[1]:
            errors.append("Min value must be less than max value")
    elif isinstance(value, bool) or not isinstance(value, (int, float)):
        errors.append("Value must be a number")

    background = rule.get("background_color") or rule.get("backgroundColor")
    text = rule.get("text_color") or rule.get("textColor")
    if not background and not text:
        errors.append("At least one of background_color or text_color is required")
    return errors


def _rule(condition: str, value: Any, background: str, text: str) -> ConditionalFormatRule:
    return ConditionalFormatRule(
        condition=condition,
        value=value,
        background_color=background,
        text_color=text,
    )


def traffic_light(low: float, high: float) -> list[ConditionalFormatRule]:
    return [
        _rule("lt", low, RED_BG, RED_TEXT),
        _rule("between", (low, high), YELLOW_BG, YELLOW_TEXT),
        _rule("gt", high, GREEN_BG, GREEN_TEXT),
    ]


def positive_negative() -> list[ConditionalFormatRule]:
    return [
        _rule("gt", 0, GREEN_BG, GREEN_TEXT),
        _rule("lt", 0, RED_BG, RED_TEXT),
    ]


def threshold(limit: float, above_is_good: bool) -> list[ConditionalFormatRule]:
    good, bad = (GREEN_BG, GREEN_TEXT), (RED_BG, RED_TEXT)
    above, below = (good, bad) if above_is_good else (bad, good)
    return [
        _rule("gte", limit, *above),
        _rule("lt", limit, *below),
    ]


def progress() -> list[ConditionalFormatRule]:
    return [
        _rule("lt", 25, RED_BG, RED_TEXT),
        _rule("between", (25, 50), "#ffe0b2", "#e65100"),
        _rule("between", (50, 75), YELLOW_BG, YELLOW_TEXT),
        _rule("between", (75, 100), "#dcedc8", "#558b2f"),
        _rule("gte", 100, GREEN_BG, GREEN_TEXT),
    ]


FORMAT_PRESETS: dict[str, Callable[..., list[ConditionalFormatRule]]] = {
    "traffic_light": traffic_light,
    "positive_negative": positive_negative,
    "threshold": threshold,
    "progress": progress,
}


def format_compact_number(value: Any) -> str:
    if value is None:
        return "-"
    number = to_number(value)
    if number is None:
        return str(value)
    magnitude = abs(number)
    if magnitude >= 1e9:
        return f"{number / 1e9:.1f}B"
    if magnitude >= 1e6:
        return f"{number / 1e6:.1f}M"
    if magnitude >= 1e3:
        return f"{number / 1e3:.1f}K"
    if number.is_integer():
        return f"{int(number):,}"
    return f"{number:,.2f}".rstrip("0").rstrip(".")


def format_percent(value: float) -> str:
    sign = "+" if value >= 0 else ""
    return f"{sign}{value:.1f}%"
