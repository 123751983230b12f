"""
Test Suite for Form Definition loading and validation

Run with: pytest tests/test_form_definition.py -v
"""

import copy
import json
import os
import tempfile
import unittest
from pathlib import Path

from formwizard.contracts import Conditional, FormConfig
from formwizard.core.form_definition import (
    form_config_from_dict,
    load_form_config,
    validate_form_document,
)

SHIPPED_FORM = Path(__file__).resolve().parent.parent / "data" / "health_assessment_form.json"


VALID_FORM = {
    "title": "Screen time",
    "steps": [
        {
            "id": "lifestyle",
            "title": "Lifestyle",
            "icon": "fa-solid fa-tv",
            "description": "<p>Habits</p>",
            "questions": [
                {"id": "hours", "label": "Hours", "type": "select",
                 "options": ["0-2", "3-5", "6+"], "required": True},
                {"id": "detail", "label": "Detail", "type": "text",
                 "conditional": {"field": "hours", "value": ["6+"]}}
            ]
        },
        {
            "id": "docs",
            "title": "Documents",
            "questions": [
                {"id": "report", "label": "Report", "type": "file"}
            ]
        }
    ]
}


class TestLoadFromFile(unittest.TestCase):

    def setUp(self):
        self.temp_file = tempfile.NamedTemporaryFile(
            mode='w', suffix='.json', delete=False
        )
        json.dump(VALID_FORM, self.temp_file)
        self.temp_file.close()

    def tearDown(self):
        os.unlink(self.temp_file.name)

    def test_load_builds_contracts(self):
        form = load_form_config(self.temp_file.name)

        self.assertIsInstance(form, FormConfig)
        self.assertEqual(form.title, "Screen time")
        self.assertEqual(form.step_count, 2)
        self.assertEqual([s.id for s in form.steps], ["lifestyle", "docs"])

        hours, detail = form.steps[0].questions
        self.assertEqual(hours.options, ("0-2", "3-5", "6+"))
        self.assertTrue(hours.required)
        self.assertFalse(detail.required)
        self.assertEqual(detail.conditional, Conditional(field="hours", value=("6+",)))

    def test_defaults_applied(self):
        form = load_form_config(self.temp_file.name)
        docs = form.steps[1]

        self.assertEqual(docs.icon, "")
        self.assertEqual(docs.description, "")
        self.assertEqual(docs.questions[0].layout, "default")
        self.assertIsNone(docs.questions[0].options)

    def test_missing_file_raises(self):
        with self.assertRaises(FileNotFoundError):
            load_form_config("/nonexistent/form.json")

    def test_find_question_across_steps(self):
        form = load_form_config(self.temp_file.name)
        self.assertEqual(form.find_question("report").type, "file")
        self.assertIsNone(form.find_question("nope"))


class TestValidation(unittest.TestCase):
    """All problems are reported at once."""

    def _form(self):
        return copy.deepcopy(VALID_FORM)

    def test_valid_document_has_no_errors(self):
        self.assertEqual(validate_form_document(self._form()), [])

    def test_empty_steps(self):
        errors = validate_form_document({"title": "x", "steps": []})
        self.assertEqual(len(errors), 1)
        self.assertIn("steps", errors[0])

    def test_not_an_object(self):
        self.assertTrue(validate_form_document(["steps"]))

    def test_duplicate_question_id(self):
        form = self._form()
        form["steps"][1]["questions"].append({"id": "hours", "label": "Again"})

        errors = validate_form_document(form)
        self.assertIn("Duplicate question id 'hours'", errors)

    def test_unknown_type(self):
        form = self._form()
        form["steps"][1]["questions"][0]["type"] = "slider"

        errors = validate_form_document(form)
        self.assertTrue(any("unknown type 'slider'" in e for e in errors))

    def test_choice_question_without_options(self):
        form = self._form()
        del form["steps"][0]["questions"][0]["options"]

        errors = validate_form_document(form)
        self.assertTrue(any("has no options" in e for e in errors))

    def test_conditional_on_undefined_question(self):
        form = self._form()
        form["steps"][0]["questions"][1]["conditional"]["field"] = "missing"

        errors = validate_form_document(form)
        self.assertTrue(any("undefined question 'missing'" in e for e in errors))

    def test_conditional_may_reference_later_step(self):
        form = self._form()
        form["steps"][0]["questions"][1]["conditional"] = {"field": "report", "value": ["x"]}
        self.assertEqual(validate_form_document(form), [])

    def test_unknown_layout(self):
        form = self._form()
        form["steps"][0]["questions"][0]["layout"] = "grid"

        errors = validate_form_document(form)
        self.assertTrue(any("unknown layout" in e for e in errors))

    def test_from_dict_raises_with_all_errors(self):
        form = self._form()
        form["steps"][0]["questions"][0]["type"] = "slider"
        form["steps"][1]["questions"].append({"label": "no id"})

        with self.assertRaises(ValueError) as ctx:
            form_config_from_dict(form)

        message = str(ctx.exception)
        self.assertIn("Form definition validation failed", message)
        self.assertIn("slider", message)
        self.assertIn("missing 'id'", message)

    def test_conditional_values_stringified(self):
        form = self._form()
        form["steps"][0]["questions"][1]["conditional"] = {"field": "hours", "value": [True, 3]}

        config = form_config_from_dict(form)
        self.assertEqual(config.steps[0].questions[1].conditional.value, ("true", "3"))

    def test_scalar_conditional_value_accepted(self):
        form = self._form()
        form["steps"][0]["questions"][1]["conditional"] = {"field": "hours", "value": "6+"}

        config = form_config_from_dict(form)
        self.assertEqual(config.steps[0].questions[1].conditional.value, ("6+",))


class TestShippedForm(unittest.TestCase):

    def test_shipped_form_is_valid(self):
        form = load_form_config(str(SHIPPED_FORM))
        self.assertEqual(form.steps[1].questions[0].id, "hours")


if __name__ == '__main__':
    unittest.main()
