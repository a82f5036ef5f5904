import pytest

from gradecore.models.question import ResponseType
from gradecore.services import QuestionScore, ScoringService
from gradecore.services.scoring_service import SCORING_RULES


def question(response_type, marks=1, partial_credit=False, qid='q1'):
    return {
        'id': qid,
        'response_type': response_type,
        'marks': marks,
        'partial_credit': partial_credit,
    }


def response(response_type, **data):
    return {'response_type': response_type, 'response_data': data}


def score(q, key, resp):
    return ScoringService.score(q, key, resp)


def test_every_response_type_has_a_rule():
    assert set(SCORING_RULES) == set(ResponseType)


# ================= SINGLE CHOICE =================

@pytest.mark.parametrize('selected', ['A', 'C', 'D'])
def test_single_choice_wrong_option_scores_zero(selected):
    result = score(question('mcq', marks=2), {'correct_option_id': 'B'},
                   response('mcq', selectedOptionId=selected))

    assert result.marks_awarded == 0
    assert result.correct is False
    assert result.marks_possible == 2


def test_single_choice_correct_option_gets_full_marks():
    result = score(question('mcq', marks=2), {'correct_option_id': 'B'},
                   response('mcq', selectedOptionId='B'))

    assert result == QuestionScore(
        question_id='q1',
        marks_awarded=2.0,
        marks_possible=2.0,
        correct=True,
        response_type='mcq',
        correct_answer='B',
    )


def test_single_choice_ids_compare_trimmed_and_case_insensitive():
    result = score(question('mcq'), {'correct_option_id': 'b'},
                   response('mcq', selected_option_id=' B '))

    assert result.correct is True
    assert result.marks_awarded == 1


def test_unanswered_question_scores_zero_but_shows_correct_answer():
    result = score(question('mcq'), {'correct_option_id': 'B'}, None)

    assert result.marks_awarded == 0
    assert result.correct is False
    assert result.requires_manual_review is False
    assert result.correct_answer == 'B'


# ================= MULTI CHOICE =================

def test_multi_choice_order_does_not_matter():
    result = score(question('multi', marks=2), {'correct_option_ids': ['A', 'C']},
                   response('multi', selectedOptionIds=['C', 'A']))

    assert result.correct is True
    assert result.marks_awarded == 2


@pytest.mark.parametrize('selected', [['A'], ['A', 'B', 'C'], ['B'], []])
def test_multi_choice_without_partial_credit_needs_the_exact_set(selected):
    result = score(question('multi', marks=2), {'correct_option_ids': ['A', 'C']},
                   response('multi', selectedOptionIds=selected))

    assert result.correct is False
    assert result.marks_awarded == 0


@pytest.mark.parametrize('selected, expected', [
    (['A'], 1.0),
    (['A', 'C'], 2.0),
    (['A', 'B'], 0.0),
    (['A', 'C', 'D'], 1.0),
    (['B', 'D'], 0.0),
])
def test_multi_choice_partial_credit(selected, expected):
    result = score(question('multi', marks=2, partial_credit=True),
                   {'correct_option_ids': ['A', 'C']},
                   response('multi', selectedOptionIds=selected))

    assert result.marks_awarded == expected
    assert result.correct is (sorted(selected) == ['A', 'C'])


def test_multi_choice_partial_credit_rounds_to_two_places():
    result = score(question('multi', marks=1, partial_credit=True),
                   {'correct_option_ids': ['A', 'B', 'C']},
                   response('multi', selectedOptionIds=['A']))

    assert result.marks_awarded == 0.33


# ================= SHORT TEXT =================

@pytest.mark.parametrize('answer', ['Canberra', 'canberra', '  CANBERRA  '])
def test_short_text_matches_case_insensitively_by_default(answer):
    result = score(question('short'), {'accepted_answers': ['Canberra']},
                   response('short', answer=answer))

    assert result.correct is True


def test_short_text_case_sensitive_key():
    key = {'accepted_answers': ['NaCl'], 'case_sensitive': True}

    assert score(question('short'), key, response('short', answer='NaCl')).correct is True
    assert score(question('short'), key, response('short', answer='nacl')).correct is False


def test_short_text_has_no_fuzzy_matching():
    result = score(question('short'), {'accepted_answers': ['Canberra']},
                   response('short', answer='Canberra city'))

    assert result.correct is False
    assert result.marks_awarded == 0


def test_short_text_accepts_any_listed_variant():
    key = {'accepted_answers': ['colour', 'color']}

    assert score(question('short'), key, response('short', answer='color')).correct is True


# ================= NUMERIC =================

@pytest.mark.parametrize('answer, correct', [
    (3.14, True),
    (3.15, True),
    (3.13, True),
    (3.1501, False),
    (3.1299, False),
    ('3.15', True),
])
def test_numeric_tolerance_is_inclusive(answer, correct):
    result = score(question('numeric'), {'exact_value': 3.14, 'tolerance': 0.01},
                   response('numeric', answer=answer))

    assert result.correct is correct


def test_numeric_without_tolerance_needs_exact_value():
    key = {'exact_value': 12}

    assert score(question('numeric'), key, response('numeric', answer='12')).correct is True
    assert score(question('numeric'), key, response('numeric', answer=12.001)).correct is False


@pytest.mark.parametrize('answer, correct', [(10, True), (15, True), (20, True), (9.99, False), (20.01, False)])
def test_numeric_range_bounds_are_inclusive(answer, correct):
    result = score(question('numeric'), {'range_min': 10, 'range_max': 20},
                   response('numeric', answer=answer))

    assert result.correct is correct


@pytest.mark.parametrize('answer', ['abc', True, [12.5], 'nan'])
def test_numeric_non_number_answer_scores_zero(answer):
    result = score(question('numeric', marks=3), {'exact_value': 12.5, 'tolerance': 0.5},
                   response('numeric', answer=answer))

    assert result.marks_awarded == 0
    assert result.correct is False
    assert result.requires_manual_review is False


# ================= BOOLEAN / ORDERING / MATCHING =================

def test_boolean_ignores_explanation():
    key = {'correct_boolean': False}
    right = score(question('boolean'), key,
                  response('boolean', answer=False, explanation='Because the moon has no light of its own'))
    wrong = score(question('boolean'), key, response('boolean', answer=True, explanation=''))

    assert right.correct is True
    assert wrong.correct is False


def test_boolean_string_answer_is_not_a_boolean():
    result = score(question('boolean'), {'correct_boolean': True}, response('boolean', answer='true'))

    assert result.marks_awarded == 0


@pytest.mark.parametrize('items, correct', [
    (['seed', 'sprout', 'plant', 'flower'], True),
    (['sprout', 'seed', 'plant', 'flower'], False),
    (['seed', 'sprout', 'plant'], False),
])
def test_ordering_needs_the_exact_sequence(items, correct):
    result = score(question('ordering', marks=2),
                   {'correct_order': ['seed', 'sprout', 'plant', 'flower']},
                   response('ordering', orderedItems=items))

    assert result.correct is correct
    assert result.marks_awarded == (2 if correct else 0)


@pytest.mark.parametrize('pairs, correct', [
    ({'dog': 'mammal', 'frog': 'amphibian'}, True),
    ({'frog': 'amphibian', 'dog': 'mammal'}, True),
    ({'dog': 'mammal'}, False),
    ({'dog': 'mammal', 'frog': 'amphibian', 'cat': 'mammal'}, False),
    ({'dog': 'amphibian', 'frog': 'mammal'}, False),
])
def test_matching_needs_every_pair(pairs, correct):
    result = score(question('matching'), {'correct_pairs': {'dog': 'mammal', 'frog': 'amphibian'}},
                   response('matching', pairs=pairs))

    assert result.correct is correct


# ================= MANUAL REVIEW =================

@pytest.mark.parametrize('answer', ['A long considered essay.', '', None])
def test_extended_text_always_needs_review(answer):
    result = score(question('extended', marks=5), {'sample_response': 'Model answer'},
                   response('extended', answer=answer))

    assert result.requires_manual_review is True
    assert result.marks_awarded == 0
    assert result.marks_possible == 5
    assert result.correct_answer == 'Model answer'
    assert result.display_score == 'pending'


@pytest.mark.parametrize('key', [None, {}, {'correct_option_id': ''}, 'B'])
def test_missing_answer_key_flags_for_review(key):
    result = score(question('mcq', marks=2), key, response('mcq', selectedOptionId='B'))

    assert result.requires_manual_review is True
    assert result.marks_awarded == 0
    assert result.correct is False


def test_unknown_response_type_flags_for_review():
    result = score(question('drawing', marks=4), {'correct_option_id': 'B'}, None)

    assert result.requires_manual_review is True
    assert result.marks_possible == 4
    assert result.response_type == 'drawing'


def test_legacy_type_alias_is_scored():
    result = score(question('multi_select'), {'correct_option_ids': ['A']},
                   {'response_data': {'selectedOptionIds': ['A']}})

    assert result.correct is True
    assert result.response_type == 'multi'


# ================= MALFORMED INPUT =================

@pytest.mark.parametrize('resp', [
    'B',
    {'response_type': 'mcq', 'response_data': 'B'},
    {'response_type': 'mcq', 'response_data': {'selectedOptionId': ['B']}},
    {'response_type': 'numeric', 'response_data': {'selectedOptionId': 'B'}},
    {'response_type': 'mcq', 'response_data': None},
])
def test_malformed_response_scores_zero_without_review(resp):
    result = score(question('mcq'), {'correct_option_id': 'B'}, resp)

    assert result.marks_awarded == 0
    assert result.correct is False
    assert result.requires_manual_review is False


def test_multi_choice_selection_that_is_not_a_list():
    result = score(question('multi'), {'correct_option_ids': ['A']},
                   response('multi', selectedOptionIds='A'))

    assert result.marks_awarded == 0


@pytest.mark.parametrize('marks, expected', [(None, 1.0), ('two', 1.0), (-3, 0.0), (4, 4.0)])
def test_question_marks_are_bounded(marks, expected):
    result = score(question('mcq', marks=marks), {'correct_option_id': 'A'},
                   response('mcq', selectedOptionId='A'))

    assert result.marks_possible == expected
    assert 0 <= result.marks_awarded <= result.marks_possible


def test_scoring_is_deterministic():
    q = question('multi', marks=3, partial_credit=True)
    key = {'correct_option_ids': ['A', 'B', 'D']}
    resp = response('multi', selectedOptionIds=['A', 'C', 'D'])

    assert score(q, key, resp) == score(q, key, resp)


def test_score_all_keeps_question_order():
    questions = [question('mcq', qid='q1'), question('boolean', qid='q2'), question('extended', qid='q3')]
    keys = {'q1': {'correct_option_id': 'A'}, 'q2': {'correct_boolean': True}}
    responses = {'q2': response('boolean', answer=True)}

    results = ScoringService.score_all(questions, keys, responses)

    assert [r.question_id for r in results] == ['q1', 'q2', 'q3']
    assert [r.marks_awarded for r in results] == [0, 1, 0]
    assert results[2].requires_manual_review is True
