"""
aa_questions
~~~~~~~~~~~~

Users, questions, replies, follows and likes for a Q&A forum, mapped
onto a SQLite database.
"""

__title__ = 'aa_questions'
__version__ = '0.3.0'
