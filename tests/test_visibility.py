"""
Test Suite for the Visibility Evaluator

Run with: pytest tests/test_visibility.py -v
"""

import unittest

from formwizard.contracts import Conditional, Question, Step
from formwizard.core.answer_store import AnswerStore
from formwizard.core.visibility import is_visible, visible_questions


class TestUnconditionalQuestions(unittest.TestCase):
    """Questions without a conditional are always shown."""

    def test_visible_with_no_answers(self):
        q = Question(id='name', label='Name')
        self.assertTrue(is_visible(q, AnswerStore()))

    def test_visible_whatever_the_answers(self):
        q = Question(id='name', label='Name')
        answers = AnswerStore({'smoker': 'yes', 'name': '', 'hours': '6+'})
        self.assertTrue(is_visible(q, answers))


class TestConditionalQuestions(unittest.TestCase):
    """Stringified membership of the controller answer."""

    def setUp(self):
        self.question = Question(
            id='cigarettes',
            label='How many?',
            conditional=Conditional(field='smoker', value=('yes',))
        )

    def test_matching_answer_shows_question(self):
        self.assertTrue(is_visible(self.question, AnswerStore({'smoker': 'yes'})))

    def test_non_matching_answer_hides_question(self):
        self.assertFalse(is_visible(self.question, AnswerStore({'smoker': 'no'})))

    def test_comparison_is_case_sensitive(self):
        """'Yes' is not 'yes'."""
        self.assertFalse(is_visible(self.question, AnswerStore({'smoker': 'Yes'})))

    def test_missing_controller_hides_question(self):
        self.assertFalse(is_visible(self.question, AnswerStore()))

    def test_trimmed_answer_matches(self):
        self.assertTrue(is_visible(self.question, AnswerStore({'smoker': ' yes\r'})))

    def test_multiple_accepted_values(self):
        q = Question(
            id='detail',
            label='Detail',
            conditional=Conditional(field='hours', value=('3-5', '6+'))
        )
        self.assertTrue(is_visible(q, AnswerStore({'hours': '3-5'})))
        self.assertTrue(is_visible(q, AnswerStore({'hours': '6+'})))
        self.assertFalse(is_visible(q, AnswerStore({'hours': '0-2'})))

    def test_boolean_controller_matches_string_value(self):
        """A controller stored as boolean True still matches 'true'."""
        q = Question(
            id='detail',
            label='Detail',
            conditional=Conditional(field='consented', value=('true',))
        )
        self.assertTrue(is_visible(q, AnswerStore({'consented': True})))
        self.assertFalse(is_visible(q, AnswerStore({'consented': False})))

    def test_numeric_controller_matches_string_value(self):
        q = Question(
            id='detail',
            label='Detail',
            conditional=Conditional(field='children', value=('2',))
        )
        self.assertTrue(is_visible(q, AnswerStore({'children': 2})))


class TestVisibleQuestions(unittest.TestCase):
    """Same-step controllers take effect immediately."""

    def setUp(self):
        self.step = Step(
            id='lifestyle',
            title='Lifestyle',
            questions=(
                Question(id='hours', label='Hours', type='select',
                         options=('0-2', '3-5', '6+'), required=True),
                Question(id='detail', label='Detail',
                         conditional=Conditional(field='hours', value=('6+',))),
                Question(id='exercise', label='Exercise'),
            )
        )

    def test_order_preserved_and_hidden_filtered(self):
        ids = [q.id for q in visible_questions(self.step, AnswerStore())]
        self.assertEqual(ids, ['hours', 'exercise'])

    def test_edit_on_same_step_reveals_question(self):
        answers = AnswerStore()
        answers.set('hours', '6+')

        ids = [q.id for q in visible_questions(self.step, answers)]
        self.assertEqual(ids, ['hours', 'detail', 'exercise'])

        answers.set('hours', '0-2')
        ids = [q.id for q in visible_questions(self.step, answers)]
        self.assertEqual(ids, ['hours', 'exercise'])


if __name__ == '__main__':
    unittest.main()
