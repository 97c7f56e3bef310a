import unittest

from auth import SessionContext, validate_sign_in, validate_sign_up
from fakes import FakeBackend


class ValidationTests(unittest.TestCase):
    def test_sign_in_requires_both_fields(self) -> None:
        self.assertEqual(validate_sign_in("", "pw"), "Please enter both email and password.")
        self.assertEqual(validate_sign_in("a@b.c", ""), "Please enter both email and password.")
        self.assertIsNone(validate_sign_in("a@b.c", "pw"))

    def test_sign_up_role_must_be_known(self) -> None:
        self.assertIsNotNone(validate_sign_up("a@b.c", "pw", "Ann", "admin"))
        self.assertIsNotNone(validate_sign_up("a@b.c", "pw", "Ann", None))
        self.assertIsNone(validate_sign_up("a@b.c", "pw", "Ann", "teacher"))

    def test_sign_up_requires_name(self) -> None:
        self.assertEqual(validate_sign_up("a@b.c", "pw", "  ", "student"), "Please enter your full name.")


class SessionContextTests(unittest.TestCase):
    def setUp(self) -> None:
        self.backend = FakeBackend()
        self.client = self.backend.client()
        self.ctx = SessionContext(self.client)

    def test_resolving_until_started(self) -> None:
        self.assertTrue(self.ctx.resolving)
        self.ctx.start()
        self.assertFalse(self.ctx.resolving)
        self.assertIsNone(self.ctx.user)
        self.assertIsNone(self.ctx.profile)

    def test_sign_up_with_invalid_role_sends_nothing(self) -> None:
        self.ctx.start()
        result = self.ctx.sign_up("a@b.c", "pw", "Ann", "admin")
        self.assertFalse(result.ok)
        self.assertEqual(self.client.auth.requests, [])
        self.assertEqual(self.backend.rows("profiles"), [])

    def test_sign_up_signs_in_and_loads_profile(self) -> None:
        self.ctx.start()
        result = self.ctx.sign_up("t@example.com", "pw", "Tess", "teacher")
        self.assertTrue(result.ok)
        self.assertFalse(result.needs_confirmation)
        self.assertIsNotNone(self.ctx.user)
        self.assertEqual(self.ctx.profile.full_name, "Tess")
        self.assertTrue(self.ctx.profile.is_teacher)

    def test_sign_up_pending_confirmation(self) -> None:
        backend = FakeBackend(confirm_email=True)
        ctx = SessionContext(backend.client())
        ctx.start()
        result = ctx.sign_up("s@example.com", "pw", "Sam", "student")
        self.assertTrue(result.ok)
        self.assertTrue(result.needs_confirmation)
        self.assertIsNone(ctx.user)

    def test_duplicate_sign_up_reports_backend_message(self) -> None:
        self.backend.add_user("t@example.com", "pw", "Tess", "teacher")
        self.ctx.start()
        result = self.ctx.sign_up("t@example.com", "pw", "Tess", "teacher")
        self.assertFalse(result.ok)
        self.assertEqual(result.error, "User already registered")

    def test_sign_in_wrong_password(self) -> None:
        self.backend.add_user("s@example.com", "pw", "Sam", "student")
        self.ctx.start()
        result = self.ctx.sign_in("s@example.com", "nope")
        self.assertFalse(result.ok)
        self.assertEqual(result.error, "Invalid login credentials")
        self.assertIsNone(self.ctx.user)

    def test_sign_in_then_sign_out_clears_identity(self) -> None:
        self.backend.add_user("s@example.com", "pw", "Sam", "student")
        self.ctx.start()
        self.assertTrue(self.ctx.sign_in("s@example.com", "pw").ok)
        self.assertTrue(self.ctx.profile.is_student)

        self.ctx.sign_out()
        self.assertIsNone(self.ctx.user)
        self.assertIsNone(self.ctx.profile)
        # Already signed out: no second request
        self.ctx.sign_out()
        self.assertEqual(self.client.auth.requests.count("sign_out"), 1)

    def test_existing_session_is_resolved_on_start(self) -> None:
        self.backend.add_user("s@example.com", "pw", "Sam", "student")
        self.client.auth.sign_in_with_password({"email": "s@example.com", "password": "pw"})
        ctx = SessionContext(self.client)
        ctx.start()
        self.assertFalse(ctx.resolving)
        self.assertEqual(ctx.profile.full_name, "Sam")

    def test_user_without_profile(self) -> None:
        self.backend.add_user("s@example.com", "pw", "Sam", "student")
        self.backend.tables["profiles"].clear()
        self.ctx.start()
        self.ctx.sign_in("s@example.com", "pw")
        self.assertIsNotNone(self.ctx.user)
        self.assertIsNone(self.ctx.profile)

    def test_token_refresh_keeps_profile_without_refetch(self) -> None:
        self.backend.add_user("s@example.com", "pw", "Sam", "student")
        self.ctx.start()
        self.assertTrue(self.ctx.sign_in("s@example.com", "pw").ok)
        profile = self.ctx.profile
        self.backend.fail("profiles", "select")
        before = self.backend.requests.count(("profiles", "select"))

        self.client.auth.refresh_session()

        self.assertEqual(self.backend.requests.count(("profiles", "select")), before)
        self.assertIs(self.ctx.profile, profile)
        self.assertEqual(self.ctx.user.email, "s@example.com")

    def test_other_events_for_unknown_user_are_ignored(self) -> None:
        self.ctx.start()
        user = type("User", (), {"id": "someone", "email": "x@example.com"})()
        self.ctx._on_auth_state_change("USER_UPDATED", type("Session", (), {"user": user})())
        self.assertIsNone(self.ctx.user)
        self.assertEqual(self.backend.requests, [])

    def test_stop_unsubscribes_listener(self) -> None:
        self.ctx.start()
        self.assertEqual(len(self.client.auth.listeners), 1)
        self.ctx.stop()
        self.assertEqual(self.client.auth.listeners, [])


if __name__ == "__main__":
    unittest.main()
