"""
Tests for the case data validator.
"""

from unittest.mock import patch

from casebook.config import Settings
from casebook.data.loader import parse_case_bundle
from casebook.engine.validator import CaseValidator
from casebook.schemas.location import Location
from casebook.utils.jsonlogic import JSONLogicEvaluator


def validator():
    return CaseValidator(Settings(_env_file=None, free_leads=["35 NW"]))


class TestCaseValidator:
    """Test authoring-defect detection"""

    def test_sample_case_is_valid(self, bundle):
        """Test that the shipped sample case passes"""
        is_valid, issues = CaseValidator(Settings(_env_file=None)).validate_bundle(bundle)
        assert issues == []
        assert is_valid

    def test_unknown_check(self):
        """Test that unknown checks are reported"""
        location = Location.model_validate({"conditions": [{"check": "requiresMoonPhase"}]})
        issues = validator().validate_location(location)
        assert issues == ["conditions[0]: unknown condition check type 'requiresMoonPhase'"]

    def test_requires_letter_without_letter(self):
        """Test a requiresLetter check missing its letter"""
        location = Location.model_validate({"conditions": [{"check": "requiresLetter"}]})
        assert "requiresLetter check without a letter" in validator().validate_location(location)[0]

    def test_requires_letter_colon_without_letter(self):
        """Test a requiresLetter: check with an empty letter"""
        location = Location.model_validate({"conditions": [{"check": "requiresLetter:"}]})
        assert validator().validate_location(location) == [
            "conditions[0]: requiresLetter check without a letter"
        ]

    def test_colon_letter_outside_alphabet(self):
        """Test that the requiresLetter:<L> letter is checked against the alphabet"""
        location = Location.model_validate({"conditions": [{"check": "requiresLetter:Z"}]})
        assert validator().validate_location(location) == [
            "conditions[0]: letter Z is outside the letter alphabet"
        ]

    def test_compiled_rules_are_checked(self):
        """Test that every known rule's expression goes through operator validation"""
        location = Location.model_validate(
            {
                "conditions": [
                    {"check": "flag:met.butler"},
                    {"onSuccess": {"followUpConditions": [{"check": "requiresLetter:C"}]}},
                ]
            }
        )
        with patch.object(JSONLogicEvaluator, "validate_expression", return_value=False) as check:
            issues = validator().validate_location(location)
        assert check.call_count == 3
        assert issues == [
            "conditions[0]: unsupported rule expression {'===': [{'var': 'value'}, True]}",
            "conditions[1]: unsupported rule expression True",
            "conditions[1].followUpConditions[0]: unsupported rule expression "
            "{'in': ['C', {'var': 'letters'}]}",
        ]

    def test_letter_outside_alphabet(self):
        """Test that letters outside the alphabet are reported"""
        location = Location.model_validate({"circlesLetter": "Z", "updates": {"circlesLetter": "Q"}})
        issues = validator().validate_location(location)
        assert len(issues) == 2

    def test_unknown_sequence_reference(self):
        """Test an action pointing at a missing sequence"""
        location = Location.model_validate(
            {"actions": [{"id": "go", "text": "Go", "consequences": {"triggersSequence": "cellar"}}]}
        )
        assert validator().validate_location(location) == ["action go: unknown sequence 'cellar'"]

    def test_duplicate_action_ids(self):
        """Test that duplicate action ids across sources are reported"""
        location = Location.model_validate(
            {
                "actions": [{"id": "ask", "text": "Ask"}],
                "conditions": [{"onSuccess": {"actions": [{"id": "ask", "text": "Ask again"}]}}],
            }
        )
        assert validator().validate_location(location) == ["action id ask is declared 2 times"]

    def test_malformed_action(self):
        """Test that actions without text are reported"""
        location = Location.model_validate({"actions": [{"id": "ask"}]})
        assert validator().validate_location(location) == [
            "action without id or text will not be shown"
        ]

    def test_bundle_level_issues(self):
        """Test address format and missing free leads"""
        bundle = parse_case_bundle({"Baker Street": {"text": "221B"}}, {"intro": "A case."})
        is_valid, issues = validator().validate_bundle(bundle)
        assert not is_valid
        assert "Baker Street: address does not follow '<number> <DISTRICT>'" in issues
        assert "Free lead 35 NW has no location data" in issues

    def test_log_issues(self, caplog):
        """Test that issues are logged as warnings"""
        bundle = parse_case_bundle({"1 NW": {"circlesLetter": "Z"}}, {"intro": "A case."})
        with caplog.at_level("WARNING"):
            issues = CaseValidator(Settings(_env_file=None, free_leads=[])).log_issues(bundle)
        assert len(issues) == 1
        assert "[Validator]" in caplog.text
