"""
Forum Models for aa_questions
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

One model class per database table, with the join queries used to walk
between users, questions, replies, follows and likes.
"""

from typing import List, Optional
from .base import BaseModel


def _check_limit(n: int) -> int:
    if isinstance(n, bool) or not isinstance(n, int) or n < 0:
        raise ValueError(f"Limit must be a non-negative integer, got {n!r}")
    return n


class User(BaseModel):
    """A forum member."""

    table = 'users'
    fields = ('fname', 'lname')

    @classmethod
    def find_by_name(cls, fname: str, lname: str) -> Optional['User']:
        """Get a user by first and last name."""
        query = f"""
            SELECT *
            FROM {cls.table}
            WHERE users.fname = ? AND users.lname = ?
            ORDER BY users.id
            LIMIT 1
        """
        row = cls._fetch_one(query, (fname, lname))
        return cls.from_row(row) if row is not None else None

    def authored_questions(self) -> List['Question']:
        return Question.find_by_author_id(self.id)

    def authored_replies(self) -> List['Reply']:
        return Reply.find_by_user_id(self.id)

    def followed_questions(self) -> List['Question']:
        return QuestionFollow.followed_questions_for_user_id(self.id)

    def liked_questions(self) -> List['Question']:
        return QuestionLike.liked_questions_for_user_id(self.id)

    def average_karma(self) -> Optional[float]:
        """
        Average number of likes per question this user authored.

        Returns None when the user has not asked anything.
        """
        query = """
            SELECT
                CAST(COUNT(question_likes.user_id) AS FLOAT) / COUNT(DISTINCT questions.id) AS avg_karma
            FROM
                questions
            INNER JOIN
                users ON users.id = questions.user_id
            LEFT OUTER JOIN
                question_likes ON questions.id = question_likes.question_id
            WHERE
                questions.user_id = ?
        """
        return self._fetch_scalar(query, (self.id,))


class Question(BaseModel):
    """A question asked by a user."""

    table = 'questions'
    fields = ('title', 'body', 'user_id')

    @classmethod
    def find_by_author_id(cls, author_id: int) -> List['Question']:
        """Get all questions asked by a user."""
        query = f"SELECT * FROM {cls.table} WHERE questions.user_id = ? ORDER BY questions.id"
        return cls._from_rows(cls._fetch_all(query, (author_id,)))

    @classmethod
    def most_followed(cls, n: int) -> List['Question']:
        return QuestionFollow.most_followed_questions(n)

    @classmethod
    def most_liked(cls, n: int) -> List['Question']:
        return QuestionLike.most_liked_questions(n)

    def author(self) -> Optional[User]:
        return User.find_by_id(self.user_id)

    def replies(self) -> List['Reply']:
        return Reply.find_by_question_id(self.id)

    def followers(self) -> List[User]:
        return QuestionFollow.followers_for_question_id(self.id)

    def num_followers(self) -> int:
        return QuestionFollow.num_followers_for_question_id(self.id)

    def likers(self) -> List[User]:
        return QuestionLike.likers_for_question_id(self.id)

    def num_likes(self) -> int:
        return QuestionLike.num_likes_for_question_id(self.id)


class Reply(BaseModel):
    """A reply to a question, optionally nested under another reply."""

    table = 'replies'
    fields = ('question_id', 'parent_id', 'user_id', 'body')

    @classmethod
    def find_by_user_id(cls, user_id: int) -> List['Reply']:
        """Get all replies written by a user."""
        query = f"SELECT * FROM {cls.table} WHERE replies.user_id = ? ORDER BY replies.id"
        return cls._from_rows(cls._fetch_all(query, (user_id,)))

    @classmethod
    def find_by_question_id(cls, question_id: int) -> List['Reply']:
        """Get all replies to a question, nested ones included."""
        query = f"SELECT * FROM {cls.table} WHERE replies.question_id = ? ORDER BY replies.id"
        return cls._from_rows(cls._fetch_all(query, (question_id,)))

    def author(self) -> Optional[User]:
        return User.find_by_id(self.user_id)

    def question(self) -> Optional[Question]:
        return Question.find_by_id(self.question_id)

    def parent_reply(self) -> Optional['Reply']:
        if self.parent_id is None:
            return None
        return Reply.find_by_id(self.parent_id)

    def child_replies(self) -> List['Reply']:
        query = f"SELECT * FROM {self.table} WHERE replies.parent_id = ? ORDER BY replies.id"
        return self._from_rows(self._fetch_all(query, (self.id,)))


class QuestionFollow(BaseModel):
    """A user following a question."""

    table = 'question_follows'
    fields = ('user_id', 'question_id')

    @classmethod
    def followers_for_question_id(cls, question_id: int) -> List[User]:
        """Get the users following a question."""
        query = """
            SELECT
                users.*
            FROM
                users
            INNER JOIN
                question_follows ON users.id = question_follows.user_id
            WHERE
                question_follows.question_id = ?
            ORDER BY
                users.id
        """
        return User._from_rows(cls._fetch_all(query, (question_id,)))

    @classmethod
    def followed_questions_for_user_id(cls, user_id: int) -> List[Question]:
        """Get the questions a user follows."""
        query = """
            SELECT
                questions.*
            FROM
                questions
            INNER JOIN
                question_follows ON questions.id = question_follows.question_id
            WHERE
                question_follows.user_id = ?
            ORDER BY
                questions.id
        """
        return Question._from_rows(cls._fetch_all(query, (user_id,)))

    @classmethod
    def num_followers_for_question_id(cls, question_id: int) -> int:
        query = f"SELECT COUNT(*) FROM {cls.table} WHERE question_follows.question_id = ?"
        return cls._fetch_scalar(query, (question_id,)) or 0

    @classmethod
    def most_followed_questions(cls, n: int) -> List[Question]:
        """Get the n questions with the most followers, ties broken by id."""
        query = """
            SELECT
                questions.*
            FROM
                question_follows
            INNER JOIN
                questions ON question_follows.question_id = questions.id
            GROUP BY
                questions.id
            ORDER BY
                COUNT(question_follows.id) DESC, questions.id ASC
            LIMIT
                ?
        """
        return Question._from_rows(cls._fetch_all(query, (_check_limit(n),)))


class QuestionLike(BaseModel):
    """A user liking a question."""

    table = 'question_likes'
    fields = ('user_id', 'question_id')

    @classmethod
    def likers_for_question_id(cls, question_id: int) -> List[User]:
        """Get the users who liked a question."""
        query = """
            SELECT
                users.*
            FROM
                users
            INNER JOIN
                question_likes ON question_likes.user_id = users.id
            WHERE
                question_likes.question_id = ?
            ORDER BY
                users.id
        """
        return User._from_rows(cls._fetch_all(query, (question_id,)))

    @classmethod
    def num_likes_for_question_id(cls, question_id: int) -> int:
        query = """
            SELECT
                COUNT(*) AS count
            FROM
                questions
            INNER JOIN
                question_likes ON questions.id = question_likes.question_id
            WHERE
                questions.id = ?
        """
        return cls._fetch_scalar(query, (question_id,)) or 0

    @classmethod
    def liked_questions_for_user_id(cls, user_id: int) -> List[Question]:
        """Get the questions a user liked."""
        query = """
            SELECT
                questions.*
            FROM
                questions
            INNER JOIN
                question_likes ON questions.id = question_likes.question_id
            WHERE
                question_likes.user_id = ?
            ORDER BY
                questions.id
        """
        return Question._from_rows(cls._fetch_all(query, (user_id,)))

    @classmethod
    def most_liked_questions(cls, n: int) -> List[Question]:
        """Get the n questions with the most likes, ties broken by id."""
        query = """
            SELECT
                questions.*
            FROM
                question_likes
            INNER JOIN
                questions ON question_likes.question_id = questions.id
            GROUP BY
                questions.id
            ORDER BY
                COUNT(question_likes.id) DESC, questions.id ASC
            LIMIT
                ?
        """
        return Question._from_rows(cls._fetch_all(query, (_check_limit(n),)))
