import unittest
from unittest.mock import MagicMock, patch

from firebase_admin import auth

from event_ratings.errors import InvalidArgument, NotFound, Unauthenticated
from event_ratings.identity import FirebaseIdentityClient, Identity, InMemoryIdentityClient


class InMemoryIdentityClientTests(unittest.TestCase):
    def setUp(self):
        self.client = InMemoryIdentityClient()

    def test_register_login_and_verify(self):
        created = self.client.create_user("ann@example.com", "secret123")
        found = self.client.find_by_email("ann@example.com")
        self.assertEqual(created, found)

        custom = self.client.issue_custom_token(found.uid)
        id_token = self.client.sign_in_with_custom_token(custom)
        self.assertEqual(self.client.verify(id_token), created)

    def test_custom_token_is_not_an_id_token(self):
        identity = self.client.create_user("ann@example.com", "secret123")
        custom = self.client.issue_custom_token(identity.uid)
        with self.assertRaises(Unauthenticated):
            self.client.verify(custom)

    def test_rejects_duplicate_and_malformed_users(self):
        self.client.create_user("ann@example.com", "secret123")
        with self.assertRaises(InvalidArgument):
            self.client.create_user("ann@example.com", "secret123")
        with self.assertRaises(InvalidArgument):
            self.client.create_user("not-an-email", "secret123")
        with self.assertRaises(InvalidArgument):
            self.client.create_user("bob@example.com", "123")

    def test_unknown_email(self):
        with self.assertRaises(NotFound):
            self.client.find_by_email("nobody@example.com")

    def test_unknown_token(self):
        with self.assertRaises(Unauthenticated):
            self.client.verify("garbage")


class FirebaseIdentityClientTests(unittest.TestCase):
    def setUp(self):
        self.app = MagicMock()
        self.client = FirebaseIdentityClient(self.app)

    @patch("event_ratings.identity.auth.verify_id_token")
    def test_verify_returns_identity(self, mock_verify):
        mock_verify.return_value = {"uid": "u1", "email": "u1@example.com"}
        self.assertEqual(
            self.client.verify("tok"), Identity(uid="u1", email="u1@example.com")
        )
        mock_verify.assert_called_once_with("tok", app=self.app)

    @patch("event_ratings.identity.auth.verify_id_token")
    def test_verify_maps_failures_to_unauthenticated(self, mock_verify):
        for error in (auth.InvalidIdTokenError("bad token"), ValueError("empty")):
            with self.subTest(error=error):
                mock_verify.side_effect = error
                with self.assertRaises(Unauthenticated) as ctx:
                    self.client.verify("tok")
                self.assertEqual(ctx.exception.detail, "Invalid token")

    @patch("event_ratings.identity.auth.create_user")
    def test_create_user(self, mock_create):
        mock_create.return_value = MagicMock(uid="u1", email="a@example.com")
        identity = self.client.create_user("a@example.com", "secret123")
        self.assertEqual(identity, Identity(uid="u1", email="a@example.com"))
        mock_create.assert_called_once_with(
            email="a@example.com", password="secret123", app=self.app
        )

    @patch("event_ratings.identity.auth.create_user")
    def test_create_user_existing_email(self, mock_create):
        mock_create.side_effect = auth.EmailAlreadyExistsError(
            "The user with the provided email already exists", None, None
        )
        with self.assertRaises(InvalidArgument):
            self.client.create_user("a@example.com", "secret123")

    @patch("event_ratings.identity.auth.get_user_by_email")
    def test_find_by_email_not_found(self, mock_get):
        mock_get.side_effect = auth.UserNotFoundError("No user record found")
        with self.assertRaises(NotFound):
            self.client.find_by_email("a@example.com")

    @patch("event_ratings.identity.auth.get_user_by_email")
    def test_find_by_email_malformed(self, mock_get):
        mock_get.side_effect = ValueError("Malformed email")
        with self.assertRaises(InvalidArgument):
            self.client.find_by_email("nope")

    @patch("event_ratings.identity.auth.create_custom_token")
    def test_issue_custom_token_decodes_bytes(self, mock_token):
        mock_token.return_value = b"signed.jwt.value"
        self.assertEqual(self.client.issue_custom_token("u1"), "signed.jwt.value")
        mock_token.assert_called_once_with("u1", app=self.app)


if __name__ == "__main__":
    unittest.main()
