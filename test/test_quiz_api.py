"""
Test cases for the quiz JSON API.
"""
from quizhub import db
from quizhub.auth.models import User
from quizhub.quiz.models import QuizAttempt


def create_payload(**overrides):
    payload = {
        'title': 'Capitals',
        'description': 'European capitals',
        'questions': [
            {
                'text': 'Capital of France?',
                'type': 'MULTIPLE_CHOICE',
                'options': ['Paris', 'Lyon', 'Nice'],
                'correct_answers': ['Paris'],
            },
            {'text': 'Berlin is in Germany.', 'type': 'TRUE_FALSE', 'correct_answer': 'true', 'points': 2},
        ],
    }
    payload.update(overrides)
    return payload


class TestQuizEndpoints:
    """Test cases for creating, reading, updating and deleting quizzes."""

    def test_list_empty(self, client):
        response = client.get('/api/quizzes')
        assert response.status_code == 200
        assert response.get_json() == {'success': True, 'quizzes': []}

    def test_create_quiz(self, client):
        response = client.post('/api/quizzes', json=create_payload())
        assert response.status_code == 201

        data = response.get_json()
        assert data['success'] is True
        quiz = data['quiz']
        assert quiz['title'] == 'Capitals'
        assert quiz['is_published'] is False
        assert quiz['question_count'] == 2
        assert quiz['total_points'] == 3
        assert quiz['creator']['email'] == 'admin@quiz.com'
        assert [q['order_index'] for q in quiz['questions']] == [1, 2]
        assert [o['option_text'] for o in quiz['questions'][1]['options']] == ['true', 'false']

    def test_create_quiz_as_named_user(self, client, default_user):
        author = User(email='author@quiz.com', name='Author')
        db.session.add(author)
        db.session.commit()

        response = client.post('/api/quizzes', json=create_payload(), headers={'X-User-Id': str(author.id)})
        assert response.status_code == 201
        assert response.get_json()['quiz']['created_by'] == author.id

    def test_create_quiz_with_unknown_user(self, client):
        response = client.post('/api/quizzes', json=create_payload(), headers={'X-User-Id': '999'})
        assert response.status_code == 404
        assert response.get_json()['success'] is False

    def test_create_quiz_missing_title(self, client):
        response = client.post('/api/quizzes', json=create_payload(title=''))
        assert response.status_code == 400
        data = response.get_json()
        assert data['success'] is False
        assert 'Title' in data['error']

    def test_create_quiz_rejects_non_object_body(self, client):
        response = client.post('/api/quizzes', data='not json', content_type='text/plain')
        assert response.status_code == 400
        response = client.post('/api/quizzes', json=['a', 'list'])
        assert response.status_code == 400

    def test_get_quiz(self, client, capitals_quiz):
        response = client.get(f'/api/quizzes/{capitals_quiz.id}')
        assert response.status_code == 200
        quiz = response.get_json()['quiz']
        assert quiz['id'] == capitals_quiz.id
        assert quiz['questions'][0]['question_text'] == 'Capital of France?'

    def test_get_missing_quiz(self, client):
        response = client.get('/api/quizzes/404')
        assert response.status_code == 404
        assert response.get_json() == {'success': False, 'error': 'Quiz 404 not found'}

    def test_publish_and_unpublish(self, client):
        quiz_id = client.post('/api/quizzes', json=create_payload()).get_json()['quiz']['id']

        response = client.patch(f'/api/quizzes/{quiz_id}', json={'is_published': True})
        assert response.status_code == 200
        assert response.get_json()['quiz']['is_published'] is True

        response = client.put(f'/api/quizzes/{quiz_id}', json={'is_published': False})
        assert response.get_json()['quiz']['is_published'] is False

    def test_update_invalid_time_limit(self, client, capitals_quiz):
        response = client.patch(f'/api/quizzes/{capitals_quiz.id}', json={'time_limit': -1})
        assert response.status_code == 400

    def test_delete_quiz(self, client, capitals_quiz):
        response = client.delete(f'/api/quizzes/{capitals_quiz.id}')
        assert response.status_code == 200
        assert client.get(f'/api/quizzes/{capitals_quiz.id}').status_code == 404


class TestQuestionEndpoints:

    def test_list_questions(self, client, mixed_quiz):
        response = client.get(f'/api/quizzes/{mixed_quiz.id}/questions')
        assert response.status_code == 200
        data = response.get_json()
        assert data['quiz_id'] == mixed_quiz.id
        assert [q['question_type'] for q in data['questions']] == ['SHORT_ANSWER', 'MULTIPLE_CHOICE']
        assert data['questions'][0]['options'] == []

    def test_add_question(self, client, capitals_quiz):
        response = client.post(f'/api/quizzes/{capitals_quiz.id}/questions', json={
            'text': 'What is 2+2?',
            'type': 'MULTIPLE_CHOICE',
            'options': [{'text': '3', 'is_correct': False}, {'text': '4', 'is_correct': True}],
        })
        assert response.status_code == 201
        question = response.get_json()['question']
        assert question['order_index'] == 2
        assert [o['is_correct'] for o in question['options']] == [False, True]

    def test_add_question_invalid_type(self, client, capitals_quiz):
        response = client.post(f'/api/quizzes/{capitals_quiz.id}/questions', json={
            'text': 'Essay time',
            'type': 'ESSAY',
        })
        assert response.status_code == 400
        assert 'Invalid question type' in response.get_json()['error']

    def test_add_question_to_missing_quiz(self, client):
        response = client.post('/api/quizzes/404/questions', json={'text': 'Q', 'type': 'SHORT_ANSWER'})
        assert response.status_code == 404


class TestSubmitEndpoint:
    """Test cases for grading submissions over HTTP."""

    def test_correct_answer(self, client, capitals_quiz):
        question_id = capitals_quiz.questions[0].id
        response = client.post(f'/api/quizzes/{capitals_quiz.id}/submit', json={
            'answers': {str(question_id): 'Paris'},
        })
        assert response.status_code == 200

        data = response.get_json()
        assert data['success'] is True
        assert data['score'] == 1
        assert data['total_points'] == 1
        assert data['percentage'] == 100
        assert data['attempt']['answers'][0]['is_correct'] is True

    def test_wrong_answer(self, client, capitals_quiz):
        question_id = capitals_quiz.questions[0].id
        data = client.post(f'/api/quizzes/{capitals_quiz.id}/submit', json={
            'answers': {str(question_id): 'Lyon'},
        }).get_json()
        assert data['score'] == 0
        assert data['percentage'] == 0

    def test_answer_by_option_id(self, client, capitals_quiz):
        question = capitals_quiz.questions[0]
        correct_id = question.get_correct_option().id
        data = client.post(f'/api/quizzes/{capitals_quiz.id}/submit', json={
            'answers': {str(question.id): {'option_id': correct_id}},
        }).get_json()
        assert data['score'] == 1
        assert data['attempt']['answers'][0]['option_id'] == correct_id
        assert data['attempt']['answers'][0]['selected_text'] == 'Paris'

    def test_short_answer_only_counts_towards_total(self, client, mixed_quiz):
        short_answer, multiple_choice = mixed_quiz.questions
        data = client.post(f'/api/quizzes/{mixed_quiz.id}/submit', json={
            'answers': {str(short_answer.id): 'Light into sugar', str(multiple_choice.id): 'Mitochondria'},
        }).get_json()
        assert data['score'] == 5
        assert data['total_points'] == 10
        assert data['percentage'] == 50

    def test_empty_and_malformed_bodies_still_score(self, client, capitals_quiz):
        url = f'/api/quizzes/{capitals_quiz.id}/submit'
        for kwargs in [
            {'json': {}},
            {'json': {'answers': 'Paris'}},
            {'json': ['Paris']},
            {'data': 'garbage', 'content_type': 'text/plain'},
        ]:
            response = client.post(url, **kwargs)
            assert response.status_code == 200
            data = response.get_json()
            assert data['score'] == 0
            assert data['total_points'] == 1
        assert QuizAttempt.query.count() == 4

    def test_non_ascii_option_id_still_scores(self, client, capitals_quiz):
        question_id = capitals_quiz.questions[0].id
        response = client.post(f'/api/quizzes/{capitals_quiz.id}/submit', json={
            'answers': {str(question_id): {'option_id': '²'}},
        })
        assert response.status_code == 200
        data = response.get_json()
        assert data['score'] == 0
        assert data['attempt']['answers'][0]['option_id'] is None

    def test_started_at_is_recorded(self, client, capitals_quiz):
        data = client.post(f'/api/quizzes/{capitals_quiz.id}/submit', json={
            'answers': {},
            'started_at': '2026-10-18T09:30:00Z',
        }).get_json()
        assert data['attempt']['started_at'] == '2026-10-18T09:30:00'

    def test_unparseable_started_at_is_ignored(self, client, capitals_quiz):
        response = client.post(f'/api/quizzes/{capitals_quiz.id}/submit', json={
            'answers': {},
            'started_at': 'yesterday',
        })
        assert response.status_code == 200
        assert response.get_json()['attempt']['started_at'] is not None

    def test_submit_as_named_user(self, client, capitals_quiz):
        taker = User(email='taker@quiz.com', name='Taker')
        db.session.add(taker)
        db.session.commit()

        data = client.post(
            f'/api/quizzes/{capitals_quiz.id}/submit',
            json={'answers': {}},
            headers={'X-User-Id': str(taker.id)},
        ).get_json()
        assert data['attempt']['user_id'] == taker.id

    def test_submit_as_unknown_user(self, client, capitals_quiz):
        response = client.post(
            f'/api/quizzes/{capitals_quiz.id}/submit',
            json={'answers': {}},
            headers={'X-User-Id': 'nobody'},
        )
        assert response.status_code == 404
        assert QuizAttempt.query.count() == 0

    def test_submit_to_missing_quiz(self, client, default_user):
        response = client.post('/api/quizzes/404/submit', json={'answers': {}})
        assert response.status_code == 404
        assert response.get_json()['success'] is False


class TestHistoryEndpoints:

    def test_attempts_newest_first(self, client, capitals_quiz):
        url = f'/api/quizzes/{capitals_quiz.id}/submit'
        question_id = str(capitals_quiz.questions[0].id)
        client.post(url, json={'answers': {question_id: 'Lyon'}, 'started_at': '2026-10-18T09:00:00'})
        client.post(url, json={'answers': {question_id: 'Paris'}, 'started_at': '2026-10-18T10:00:00'})

        response = client.get(f'/api/quizzes/{capitals_quiz.id}/attempts')
        assert response.status_code == 200
        data = response.get_json()
        assert data['quiz_title'] == 'Capitals'
        assert [a['score'] for a in data['attempts']] == [1, 0]
        assert data['attempts'][0]['user']['email'] == 'admin@quiz.com'

    def test_debug_snapshot(self, client, capitals_quiz):
        question_id = str(capitals_quiz.questions[0].id)
        client.post(f'/api/quizzes/{capitals_quiz.id}/submit', json={'answers': {question_id: 'Paris'}})

        response = client.get(f'/api/quizzes/{capitals_quiz.id}/debug')
        assert response.status_code == 200
        data = response.get_json()
        assert data['success'] is True
        assert data['summary'] == {
            'total_questions': 1,
            'total_points': 1,
            'total_attempts': 1,
            'average_score': 1.0,
        }
        assert data['quiz']['questions'][0]['options'][0]['is_correct'] is True

    def test_debug_missing_quiz(self, client):
        assert client.get('/api/quizzes/404/debug').status_code == 404


class TestErrorHandling:

    def test_unknown_api_route_returns_json(self, client):
        response = client.get('/api/nothing-here')
        assert response.status_code == 404
        data = response.get_json()
        assert data['success'] is False
        assert data['path'] == '/api/nothing-here'

    def test_method_not_allowed_returns_json(self, client):
        response = client.post('/api/quizzes/1/debug')
        assert response.status_code == 405
        assert response.get_json()['method'] == 'POST'
