"""
Query classification for routing.

Maps request text onto the closed set of task categories with ordered
keyword rules. Fast, local and deterministic; no API calls required.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Protocol, Sequence, runtime_checkable

from routerpro.core.models import TaskCategory


@runtime_checkable
class Classifier(Protocol):
    """Anything that can map request text to a task category."""

    def classify(self, text: str) -> TaskCategory:
        ...


@dataclass(frozen=True)
class ClassificationRule:
    """Keywords that, if any is present, select a category."""

    category: TaskCategory
    keywords: tuple[str, ...]

    def match(self, text_lower: str) -> str | None:
        for keyword in self.keywords:
            if keyword in text_lower:
                return keyword
        return None


@dataclass(frozen=True)
class ClassificationResult:
    """Category plus the keyword that triggered it."""

    category: TaskCategory
    matched_keyword: str | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category.value,
            "matched_keyword": self.matched_keyword,
        }


# Order matters: the first matching rule wins.
DEFAULT_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule(TaskCategory.CODE, ("code", "debug")),
    ClassificationRule(TaskCategory.ANALYSIS, ("analyze", "analysis")),
    ClassificationRule(TaskCategory.CREATIVE, ("creative", "write", "story")),
    ClassificationRule(TaskCategory.SIMPLE, ("what is", "define")),
)


class KeywordClassifier:
    """
    Case-insensitive substring classifier.

    Example:
        classifier = KeywordClassifier()
        classifier.classify("Debug my Python function")  # TaskCategory.CODE
    """

    def __init__(
        self,
        rules: Iterable[ClassificationRule] | None = None,
        default: TaskCategory = TaskCategory.GENERAL,
    ):
        self._rules: tuple[ClassificationRule, ...] = (
            tuple(rules) if rules is not None else DEFAULT_RULES
        )
        for rule in self._rules:
            if not all(k == k.lower() for k in rule.keywords):
                raise ValueError(f"Keywords must be lowercase: {rule.keywords}")
        self._default = default

    @property
    def rules(self) -> tuple[ClassificationRule, ...]:
        return self._rules

    def explain(self, text: str | None) -> ClassificationResult:
        """Classify and report which keyword fired."""
        text_lower = (text or "").lower()
        if text_lower.strip():
            for rule in self._rules:
                keyword = rule.match(text_lower)
                if keyword is not None:
                    return ClassificationResult(rule.category, keyword)
        return ClassificationResult(self._default, None)

    def classify(self, text: str | None) -> TaskCategory:
        """
        Classify request text.

        Never raises; empty or whitespace-only text is ``GENERAL``.
        """
        return self.explain(text).category

    def classify_batch(self, texts: Sequence[str]) -> list[TaskCategory]:
        """Classify multiple texts."""
        return [self.classify(text) for text in texts]
