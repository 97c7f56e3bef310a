import unittest

import db
from fakes import FakeBackend


class DbReadTests(unittest.TestCase):
    def setUp(self) -> None:
        self.backend = FakeBackend()
        self.student = self.backend.add_user("s@example.com", "pw", "Sam Student", "student")
        self.teacher = self.backend.add_user("t@example.com", "pw", "Tess Teacher", "teacher")
        self.other_teacher = self.backend.add_user("o@example.com", "pw", "Otto Other", "teacher")
        self.sb = self.backend.client()

    def test_fetch_profile(self) -> None:
        row = db.fetch_profile(self.teacher, sb=self.sb)
        self.assertEqual(row["full_name"], "Tess Teacher")
        self.assertIsNone(db.fetch_profile("missing", sb=self.sb))

    def test_fetch_profile_failure_returns_none(self) -> None:
        self.backend.fail("profiles", "select")
        self.assertIsNone(db.fetch_profile(self.teacher, sb=self.sb))

    def test_list_teachers_only_teachers(self) -> None:
        names = sorted(r["full_name"] for r in db.list_teachers(sb=self.sb))
        self.assertEqual(names, ["Otto Other", "Tess Teacher"])

    def test_list_teachers_failure_is_none_not_empty(self) -> None:
        self.backend.fail("profiles", "select")
        self.assertIsNone(db.list_teachers(sb=self.sb))

    def test_student_questions_newest_first_with_teacher_and_answers(self) -> None:
        self.assertTrue(db.insert_question(self.student, self.teacher, "First?", sb=self.sb))
        self.assertTrue(db.insert_question(self.student, self.other_teacher, "Second?", sb=self.sb))
        rows = db.list_student_questions(self.student, sb=self.sb)
        self.assertEqual([r["content"] for r in rows], ["Second?", "First?"])
        self.assertEqual(rows[0]["profiles"]["full_name"], "Otto Other")
        self.assertEqual(rows[1]["answers"], [])

    def test_teacher_questions_scoped_to_teacher_with_student_name(self) -> None:
        db.insert_question(self.student, self.teacher, "Mine?", sb=self.sb)
        db.insert_question(self.student, self.other_teacher, "Not mine", sb=self.sb)
        rows = db.list_teacher_questions(self.teacher, sb=self.sb)
        self.assertEqual([r["content"] for r in rows], ["Mine?"])
        self.assertEqual(rows[0]["profiles"]["full_name"], "Sam Student")

    def test_question_belongs_to_student(self) -> None:
        db.insert_question(self.student, self.teacher, "Mine?", sb=self.sb)
        qid = self.backend.rows("questions")[0]["id"]
        self.assertTrue(db.question_belongs_to_student(qid, self.student, sb=self.sb))
        self.assertFalse(db.question_belongs_to_student(qid, self.teacher, sb=self.sb))
        self.assertFalse(db.question_belongs_to_student("", self.student, sb=self.sb))

    def test_fetch_rows_filters_and_raises(self) -> None:
        db.insert_question(self.student, self.teacher, "A", sb=self.sb)
        db.insert_question(self.student, self.other_teacher, "B", sb=self.sb)
        rows = db.fetch_rows("questions", {"teacher_id": self.teacher}, "id,status", sb=self.sb)
        self.assertEqual(len(rows), 1)
        self.assertEqual(set(rows[0]), {"id", "status"})
        self.backend.fail("questions", "select")
        with self.assertRaises(RuntimeError):
            db.fetch_rows("questions", sb=self.sb)


class DbWriteTests(unittest.TestCase):
    def setUp(self) -> None:
        self.backend = FakeBackend()
        self.student = self.backend.add_user("s@example.com", "pw", "Sam", "student")
        self.teacher = self.backend.add_user("t@example.com", "pw", "Tess", "teacher")
        self.sb = self.backend.client()

    def test_insert_question_is_pending_and_trimmed(self) -> None:
        self.assertTrue(db.insert_question(self.student, self.teacher, "  What is 2+2?  ", sb=self.sb))
        row = self.backend.rows("questions")[0]
        self.assertEqual(row["content"], "What is 2+2?")
        self.assertEqual(row["status"], "pending")

    def test_insert_failure_returns_false(self) -> None:
        self.backend.fail("questions", "insert")
        self.assertFalse(db.insert_question(self.student, self.teacher, "Q", sb=self.sb))
        self.assertEqual(self.backend.rows("questions"), [])

    def test_empty_echo_counts_as_failure(self) -> None:
        self.backend.silent.add(("answers", "insert"))
        self.assertFalse(db.insert_answer("q1", self.teacher, "A", sb=self.sb))

    def test_mark_question_answered(self) -> None:
        db.insert_question(self.student, self.teacher, "Q", sb=self.sb)
        qid = self.backend.rows("questions")[0]["id"]
        self.assertTrue(db.mark_question_answered(qid, sb=self.sb))
        self.assertEqual(self.backend.rows("questions")[0]["status"], "answered")
        self.assertFalse(db.mark_question_answered("missing", sb=self.sb))


if __name__ == "__main__":
    unittest.main()
