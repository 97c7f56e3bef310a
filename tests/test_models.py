import unittest

from models import Answer, Profile, Question


class ProfileTests(unittest.TestCase):
    def test_from_row_normalizes_role_and_name(self) -> None:
        p = Profile.from_row({"id": "p1", "user_id": "u1", "full_name": "  Ada Lovelace ", "role": "Teacher"})
        self.assertEqual(p.full_name, "Ada Lovelace")
        self.assertTrue(p.is_teacher)
        self.assertFalse(p.is_student)

    def test_unknown_role_is_neither(self) -> None:
        p = Profile.from_row({"id": "p1", "user_id": "u1", "full_name": "X", "role": "admin"})
        self.assertFalse(p.is_teacher)
        self.assertFalse(p.is_student)


class QuestionTests(unittest.TestCase):
    def test_counterpart_name_from_embedded_object(self) -> None:
        q = Question.from_row({
            "id": "q1", "content": "Why?", "status": "pending",
            "student_id": "s", "teacher_id": "t",
            "profiles": {"full_name": "Mr T"},
        })
        self.assertEqual(q.counterpart_name, "Mr T")
        self.assertTrue(q.is_pending)
        self.assertEqual(q.answers, [])

    def test_counterpart_name_from_embedded_list(self) -> None:
        q = Question.from_row({"id": "q1", "content": "Why?", "status": "answered", "profiles": [{"full_name": "Sam"}]})
        self.assertEqual(q.counterpart_name, "Sam")
        self.assertTrue(q.is_answered)

    def test_missing_embed_gives_empty_name(self) -> None:
        q = Question.from_row({"id": "q1", "content": "Why?", "status": "pending", "profiles": None})
        self.assertEqual(q.counterpart_name, "")

    def test_unknown_status_reads_as_pending(self) -> None:
        q = Question.from_row({"id": "q1", "content": "Why?", "status": "archived"})
        self.assertEqual(q.status, "pending")

    def test_answers_sorted_oldest_first_with_teacher_names(self) -> None:
        q = Question.from_row({
            "id": "q1", "content": "Why?", "status": "answered",
            "answers": [
                {"id": "a2", "content": "Later", "created_at": "2024-01-15T11:00:00+00:00",
                 "profiles": {"full_name": "Mr T"}},
                {"id": "a1", "content": "First", "created_at": "2024-01-15T10:00:00+00:00"},
            ],
        })
        self.assertEqual([a.content for a in q.answers], ["First", "Later"])
        self.assertIsInstance(q.answers[0], Answer)
        self.assertEqual(q.answers[1].teacher_name, "Mr T")
        self.assertEqual(q.answers[0].teacher_name, "")


if __name__ == "__main__":
    unittest.main()
