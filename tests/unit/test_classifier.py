"""Tests for query classification."""

import pytest

from routerpro.core.models import TaskCategory
from routerpro.routing.classifier import (
    Classifier,
    ClassificationRule,
    KeywordClassifier,
)


@pytest.fixture
def classifier():
    return KeywordClassifier()


class TestKeywordClassifier:
    """Tests for the default rule set."""

    @pytest.mark.parametrize("text", [
        "debug",
        "DEBUG this please",
        "Can you DeBuG my loop?",
        "Debug my Python function",
        "I need to debug an analysis script",
    ])
    def test_debug_is_always_code(self, classifier, text):
        assert classifier.classify(text) == TaskCategory.CODE

    def test_code_keyword(self, classifier):
        assert classifier.classify("Review this code snippet") == TaskCategory.CODE

    def test_analysis_keywords(self, classifier):
        assert classifier.classify("Analyze Q3 revenue") == TaskCategory.ANALYSIS
        assert classifier.classify("Give me an analysis of churn") == TaskCategory.ANALYSIS

    def test_creative_keywords(self, classifier):
        assert classifier.classify("Write a creative story") == TaskCategory.CREATIVE
        assert classifier.classify("Tell me a story") == TaskCategory.CREATIVE
        assert classifier.classify("Be creative") == TaskCategory.CREATIVE

    def test_simple_keywords(self, classifier):
        assert classifier.classify("What is React?") == TaskCategory.SIMPLE
        assert classifier.classify("Define entropy") == TaskCategory.SIMPLE

    def test_fallback_is_general(self, classifier):
        assert classifier.classify("Hello there") == TaskCategory.GENERAL

    @pytest.mark.parametrize("text", ["", "   ", "\n\t", None])
    def test_blank_text_is_general(self, classifier, text):
        assert classifier.classify(text) == TaskCategory.GENERAL

    def test_first_rule_wins(self, classifier):
        # code beats analysis, analysis beats creative, creative beats simple
        assert classifier.classify("Analyze this code") == TaskCategory.CODE
        assert classifier.classify("Write an analysis") == TaskCategory.ANALYSIS
        assert classifier.classify("What is the story?") == TaskCategory.CREATIVE

    def test_substring_matching(self, classifier):
        # "decode" contains "code"
        assert classifier.classify("How do I decode base64") == TaskCategory.CODE

    def test_deterministic(self, classifier):
        text = "Write a creative story"
        assert classifier.classify(text) == classifier.classify(text)

    def test_classify_batch(self, classifier):
        results = classifier.classify_batch(["debug it", "what is x", "hi"])
        assert results == [TaskCategory.CODE, TaskCategory.SIMPLE, TaskCategory.GENERAL]


class TestExplain:
    """Tests for classification explanations."""

    def test_reports_matched_keyword(self, classifier):
        result = classifier.explain("Please analyze this")
        assert result.category == TaskCategory.ANALYSIS
        assert result.matched_keyword == "analyze"

    def test_no_match(self, classifier):
        result = classifier.explain("Hello")
        assert result.category == TaskCategory.GENERAL
        assert result.matched_keyword is None
        assert result.to_dict() == {"category": "general", "matched_keyword": None}


class TestCustomRules:
    """Tests for custom rule sets."""

    def test_custom_rules(self):
        classifier = KeywordClassifier(
            rules=[ClassificationRule(TaskCategory.SIMPLE, ("hi",))],
        )
        assert classifier.classify("HI there") == TaskCategory.SIMPLE
        assert classifier.classify("debug") == TaskCategory.GENERAL

    def test_uppercase_keywords_rejected(self):
        with pytest.raises(ValueError):
            KeywordClassifier(rules=[ClassificationRule(TaskCategory.CODE, ("Code",))])

    def test_satisfies_protocol(self, classifier):
        assert isinstance(classifier, Classifier)
