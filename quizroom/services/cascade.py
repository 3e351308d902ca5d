"""
Cascading deletes over the classroom tree.

Firestore does not delete subcollections with their parent, so every
level is removed explicitly, children before parent:

    quiz:       quizQuestions/*, stats/*, then the quiz doc
    classroom:  every quiz (as above), members/*, then the classroom doc

There is no transaction spanning the subtree. If a step fails the
deletion stops there and the parent is still present, so running the
same delete again finishes the job.
"""

import logging

from quizroom import firestore_dao as dao

logger = logging.getLogger(__name__)


def delete_quiz_tree(db, classroom_id, quiz_id):
    quiz = dao.quiz_ref(db, classroom_id, quiz_id)
    questions = dao.delete_collection(db, quiz.collection(dao.QUESTIONS))
    stats = dao.delete_collection(db, quiz.collection(dao.STATS))
    quiz.delete()
    logger.info('Deleted quiz %s/%s (%d questions, %d stats)',
                classroom_id, quiz_id, questions, stats)


def delete_classroom_tree(db, classroom_id):
    classroom = dao.classroom_ref(db, classroom_id)
    quiz_ids = dao.get_quiz_ids(db, classroom_id)
    for quiz_id in quiz_ids:
        delete_quiz_tree(db, classroom_id, quiz_id)
    members = dao.delete_collection(db, classroom.collection(dao.MEMBERS))
    classroom.delete()
    logger.info('Deleted classroom %s (%d quizzes, %d members)',
                classroom_id, len(quiz_ids), members)
