"""Whole-app runs through Streamlit's AppTest on the in-memory Supabase fake."""

import unittest
from pathlib import Path
from unittest import mock

from streamlit.testing.v1 import AppTest

import config
import db
import ui_dashboard
from fakes import FakeBackend
from models import Question
from ui_student import visible_answers
from workflows import MSG_ANSWER_FAILED, MSG_ANSWER_PARTIAL, MSG_QUESTION_OK

APP_PATH = str(Path(__file__).resolve().parents[1] / "app.py")


def _toasts(at: AppTest) -> list:
    return [t.value for t in at.toast]


def _markdown(at: AppTest) -> str:
    return "\n".join(m.value for m in at.markdown)


class AppFlowTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.backend = FakeBackend()
        self.clients = []
        self._signed_in_client = None
        patches = [
            mock.patch.object(config, "SUPABASE_URL", "https://example.supabase.co"),
            mock.patch.object(config, "SUPABASE_ANON_KEY", "anon-key"),
            mock.patch.object(config, "LOG_FILE", ""),
            mock.patch.object(db, "create_supabase_client", side_effect=self._new_client),
            mock.patch.object(ui_dashboard, "st_autorefresh", return_value=0),
        ]
        for p in patches:
            p.start()
            self.addCleanup(p.stop)

    def _new_client(self, *args, **kwargs):
        client = self._signed_in_client or self.backend.client()
        self._signed_in_client = None
        self.clients.append(client)
        return client

    def open_app(self, *, email=None, route=None, history=None) -> AppTest:
        if email is not None:
            client = self.backend.client()
            client.auth.sign_in_with_password({"email": email, "password": "pw"})
            self._signed_in_client = client
        at = AppTest.from_file(APP_PATH, default_timeout=10)
        if route is not None:
            at.session_state["route"] = route
        if history is not None:
            at.session_state["route_history"] = list(history)
        at.run()
        self.assertFalse(at.exception, [e.value for e in at.exception])
        return at


class StudentDashboardTests(AppFlowTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.teacher_id = self.backend.add_user("t@example.com", "pw", "Tess", "teacher")
        self.student_id = self.backend.add_user("s@example.com", "pw", "Sam", "student")

    def test_submit_clears_form_and_confirms(self) -> None:
        at = self.open_app(email="s@example.com", route="dashboard")
        at.selectbox(key="student_teacher_choice").select(self.teacher_id)
        at.text_area(key="student_question_text").input("What is 2+2?")
        at.button(key="student_submit_question").click().run()

        self.assertEqual(at.session_state["student_question_text"], "")
        self.assertIsNone(at.session_state["student_teacher_choice"])
        self.assertIn(f"**Success**: {MSG_QUESTION_OK}", _toasts(at))
        rows = self.backend.rows("questions")
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]["teacher_id"], self.teacher_id)
        self.assertIn("What is 2+2?", _markdown(at))

    def test_failed_submit_keeps_text(self) -> None:
        at = self.open_app(email="s@example.com", route="dashboard")
        self.backend.fail("questions", "insert")
        at.selectbox(key="student_teacher_choice").select(self.teacher_id)
        at.text_area(key="student_question_text").input("What is 2+2?")
        at.button(key="student_submit_question").click().run()

        self.assertEqual(at.session_state["student_question_text"], "What is 2+2?")
        self.assertTrue(any(t.startswith("**Error**") for t in _toasts(at)))

    def test_answer_hidden_until_question_answered(self) -> None:
        writer = self.backend.client()
        db.insert_question(self.student_id, self.teacher_id, "What is 2+2?", sb=writer)
        qid = self.backend.rows("questions")[0]["id"]
        db.insert_answer(qid, self.teacher_id, "It is 4.", sb=writer)

        at = self.open_app(email="s@example.com", route="dashboard")
        self.assertIn("What is 2+2?", _markdown(at))
        self.assertNotIn("It is 4.", _markdown(at))

        db.mark_question_answered(qid, sb=writer)
        at.button(key="dashboard_refresh").click().run()
        self.assertIn("It is 4.", _markdown(at))


class TeacherDashboardTests(AppFlowTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.teacher_id = self.backend.add_user("t@example.com", "pw", "Tess", "teacher")
        self.student_id = self.backend.add_user("s@example.com", "pw", "Sam", "student")
        db.insert_question(self.student_id, self.teacher_id, "What is 2+2?", sb=self.backend.client())
        self.qid = self.backend.rows("questions")[0]["id"]

    def _answer(self, at: AppTest, text: str) -> None:
        at.text_area(key=f"answer_text::{self.qid}").input(text)
        at.button(key=f"answer_submit::{self.qid}").click().run()

    def test_failed_status_update_warns_then_retry_completes(self) -> None:
        at = self.open_app(email="t@example.com", route="dashboard")
        self.backend.fail("questions", "update")
        self._answer(at, "It is 4.")

        self.assertIn(f"**Warning**: {MSG_ANSWER_PARTIAL}", _toasts(at))
        self.assertEqual(len(self.backend.rows("answers")), 1)
        self.assertEqual(self.backend.rows("questions")[0]["status"], "pending")

        self.backend.heal()
        at.button(key=f"retry_status::{self.qid}").click().run()
        self.assertEqual(self.backend.rows("questions")[0]["status"], "answered")
        self.assertTrue(any(t.startswith("**Success**") for t in _toasts(at)))

    def test_failed_insert_reports_error(self) -> None:
        at = self.open_app(email="t@example.com", route="dashboard")
        self.backend.fail("answers", "insert")
        self._answer(at, "It is 4.")

        self.assertIn(f"**Error**: {MSG_ANSWER_FAILED}", _toasts(at))
        self.assertEqual(self.backend.rows("questions")[0]["status"], "pending")

    def test_by_student_table_renders(self) -> None:
        at = self.open_app(email="t@example.com", route="dashboard")
        self.assertEqual(len(at.dataframe), 1)
        self.assertEqual(list(at.dataframe[0].value["Student"]), ["Sam"])


class RoutingTests(AppFlowTestCase):
    def test_dashboard_redirects_to_auth_without_session(self) -> None:
        at = self.open_app(route="dashboard", history=["landing"])
        self.assertEqual(at.session_state["route"], "auth")
        self.assertEqual(at.session_state["route_history"], ["landing"])

    def test_signed_in_user_skips_auth_page(self) -> None:
        self.backend.add_user("s@example.com", "pw", "Sam", "student")
        at = self.open_app(email="s@example.com", route="auth", history=["landing"])
        self.assertEqual(at.session_state["route"], "dashboard")
        self.assertEqual(at.session_state["route_history"], ["landing"])

    def test_get_started_then_back(self) -> None:
        at = self.open_app()
        self.assertEqual(at.session_state["route"], "landing")

        at.button(key="landing_get_started").click().run()
        self.assertEqual(at.session_state["route"], "auth")
        self.assertEqual(at.session_state["route_history"], ["landing"])
        self.assertIn(config.APP_TAGLINE, _markdown(at))

        at.button(key="auth_back").click().run()
        self.assertEqual(at.session_state["route"], "landing")
        self.assertEqual(at.session_state["route_history"], [])

    def test_sign_out_returns_to_auth(self) -> None:
        self.backend.add_user("s@example.com", "pw", "Sam", "student")
        at = self.open_app(email="s@example.com", route="dashboard", history=["landing", "auth"])
        old_ctx = at.session_state["session_context"]
        client = self.clients[0]
        self.assertEqual(len(client.auth.listeners), 1)

        at.button(key="sign_out").click().run()

        self.assertEqual(at.session_state["route"], "auth")
        self.assertEqual(at.session_state["route_history"], ["landing", "auth"])
        self.assertIsNot(at.session_state["session_context"], old_ctx)
        self.assertIsNone(at.session_state["session_context"].user)
        # The old context's listener is gone; only the new one remains.
        self.assertEqual(len(client.auth.listeners), 1)
        self.assertEqual(client.auth.requests.count("sign_out"), 1)


class VisibleAnswersTests(unittest.TestCase):
    def _question(self, status: str) -> Question:
        return Question.from_row({
            "id": "q1",
            "content": "What is 2+2?",
            "status": status,
            "student_id": "s1",
            "teacher_id": "t1",
            "answers": [{"id": "a1", "question_id": "q1", "teacher_id": "t1", "content": "It is 4."}],
        })

    def test_pending_question_hides_answers(self) -> None:
        self.assertEqual(visible_answers(self._question("pending")), [])

    def test_answered_question_shows_answers(self) -> None:
        answers = visible_answers(self._question("answered"))
        self.assertEqual([a.content for a in answers], ["It is 4."])


if __name__ == "__main__":
    unittest.main()
