"""TemplateStore loading and lookup tests.

Expected counts for the bundled templates/awv_standard.yaml:
    8 sections, 19 questions
"""

import logging

import pytest

from awv_visits.models.question import QuestionType
from awv_visits.models.skip_logic import SkipAction, TargetType
from awv_visits.templates import TemplateStore, lint_template

from helpers.builders import hide_if, question, section, template


def _write(path, text):
    path.write_text(text, encoding="utf-8")
    return path


# =====================================================================
# Bundled template
# =====================================================================


def test_store_loads_standard_template(template_store):
    """The standard AWV template loads with all sections and questions."""
    t = template_store.get_template("awv-standard")
    assert t.section_count == 8, f"Expected 8 sections, got {t.section_count}"
    assert t.question_count == 19, f"Expected 19 questions, got {t.question_count}"


def test_standard_template_has_no_dangling_rules(standard_template):
    assert lint_template(standard_template) == []


def test_section_rule_parsed(standard_template):
    """Section-level rules keep their target type and section id."""
    q = standard_template.find_question("mmse")
    rule = q.skip_logic_rules[0]
    assert rule.target_type == TargetType.SECTION
    assert rule.target_section_id == "cognition-detail"
    assert rule.action == SkipAction.HIDE


def test_type_aliases_resolved(standard_template):
    assert standard_template.find_question("exercise_frequency").question_type == QuestionType.SINGLE_CHOICE
    assert standard_template.find_question("screenings_due").question_type == QuestionType.MULTI_CHOICE
    assert standard_template.find_question("phq9").is_composite is True


def test_unknown_template_raises_key_error(template_store):
    with pytest.raises(KeyError):
        template_store.get_template("no-such-template")


# =====================================================================
# Loading edge cases
# =====================================================================


def test_camel_case_keys_accepted(tmp_path):
    """Templates exported with camelCase keys load the same as snake_case."""
    _write(tmp_path / "camel.yml", """
id: camel
name: Camel
isActive: false
sections:
  - id: s1
    title: One
    questions:
      - id: q1
        text: Q1?
        type: yes_no
        skipLogicRules:
          - id: r1
            condition: {questionId: q0, operator: equals, value: "no"}
            action: hide
            targetType: SECTION
            targetSectionId: s1
""")
    store = TemplateStore(tmp_path)
    store.load()
    t = store.get_template("camel")
    assert t.is_active is False
    rule = t.sections[0].questions[0].skip_logic_rules[0]
    assert rule.condition.question_id == "q0"
    assert rule.is_section_rule is True


def test_list_templates_active_only(tmp_path):
    """A file may hold a list of templates; inactive ones are filtered on request."""
    _write(tmp_path / "many.yaml", """
- id: a
  name: A
- id: b
  name: B
  is_active: false
""")
    store = TemplateStore(tmp_path)
    store.load()
    assert [t.id for t in store.list_templates()] == ["a", "b"]
    assert [t.id for t in store.list_templates(active_only=True)] == ["a"]


def test_duplicate_ids_raise(tmp_path):
    _write(tmp_path / "one.yaml", "id: dup\nname: One\n")
    _write(tmp_path / "two.yaml", "id: dup\nname: Two\n")
    with pytest.raises(ValueError, match="already exists"):
        TemplateStore(tmp_path).load()


def test_missing_directory_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        TemplateStore(tmp_path / "missing").load()


def test_dangling_rules_are_warned_not_rejected(caplog):
    """Rules pointing at unknown questions or sections still load, with a warning."""
    t = template(section(
        "s1",
        question("q1", rules=[
            hide_if("r1", "ghost", "equals", "x"),
            hide_if("r2", "q1", "equals", "x", section="nowhere"),
        ]),
    ))
    store = TemplateStore("unused")
    with caplog.at_level(logging.WARNING, logger="awv_visits.templates"):
        store.add(t)
    assert store.has_template("t1")
    assert "unknown source question 'ghost'" in caplog.text
    assert "unknown target section 'nowhere'" in caplog.text


def test_unrecognized_type_falls_back_with_warning():
    """An unknown type tag renders as free text and carries a warning."""
    q = question("q1", type="slider")
    assert q.question_type == QuestionType.FREE_TEXT
    assert 'Unrecognized question type "slider"' in q.type_warning


def test_unrecognized_type_with_options_is_single_choice():
    q = question("q1", type="slider", options=[{"id": "a", "text": "A"}])
    assert q.question_type == QuestionType.SINGLE_CHOICE
    assert q.type_warning is None
