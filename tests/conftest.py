import os
import tempfile

# Logging is configured once per process; keep test logs out of the working tree
os.environ.setdefault('LOG_DIR', tempfile.mkdtemp(prefix='aa_questions-logs-'))
os.environ.setdefault('LOG_LEVEL', 'CRITICAL')

import pytest

from aa_questions.database import Database, Question, QuestionFollow, QuestionLike, Reply, User
from aa_questions.logging_config import get_logger

get_logger('aa_questions.tests')


@pytest.fixture
def db():
    """An empty, fully migrated in-memory database shared with the models."""
    database = Database({'database': ':memory:'})
    yield database
    database.close()


@pytest.fixture
def forum(db):
    """
    A small seeded forum.

    Follows: q3 by ada, alan, grace; q1 by alan, grace; q2 by nobody.
    Likes: q1 by alan, grace; q2 by grace; q3 by ada.
    Replies: r1 (alan) on q1, r2 (ada) and r3 (grace) answer r1, r4 (ada) on q3.
    """
    ada = User(fname='Ada', lname='Lovelace').save()
    alan = User(fname='Alan', lname='Turing').save()
    grace = User(fname='Grace', lname='Hopper').save()
    linus = User(fname='Linus', lname='Torvalds').save()

    q1 = Question(title='Analytical engine', body='Can it compose music?', user_id=ada.id).save()
    q2 = Question(title='Bernoulli numbers', body='Is note G correct?', user_id=ada.id).save()
    q3 = Question(title='Imitation game', body='Can machines think?', user_id=alan.id).save()

    for user, question in [(ada, q3), (alan, q3), (grace, q3), (alan, q1), (grace, q1)]:
        QuestionFollow(user_id=user.id, question_id=question.id).save()

    for user, question in [(alan, q1), (grace, q1), (grace, q2), (ada, q3)]:
        QuestionLike(user_id=user.id, question_id=question.id).save()

    r1 = Reply(question_id=q1.id, parent_id=None, user_id=alan.id, body='Given the right notation, yes.').save()
    r2 = Reply(question_id=q1.id, parent_id=r1.id, user_id=ada.id, body='That was my thought.').save()
    r3 = Reply(question_id=q1.id, parent_id=r1.id, user_id=grace.id, body='Someone should write a compiler.').save()
    r4 = Reply(question_id=q3.id, parent_id=None, user_id=ada.id, body='Only what we order them to.').save()

    return {
        'ada': ada, 'alan': alan, 'grace': grace, 'linus': linus,
        'q1': q1, 'q2': q2, 'q3': q3,
        'r1': r1, 'r2': r2, 'r3': r3, 'r4': r4,
    }
