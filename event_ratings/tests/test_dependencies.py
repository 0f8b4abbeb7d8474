import json
import unittest
from unittest.mock import patch

from fastapi.testclient import TestClient

from event_ratings import dependencies
from event_ratings.app import create_app
from event_ratings.config import Settings
from event_ratings.identity import FirebaseIdentityClient, InMemoryIdentityClient
from event_ratings.store import FirestoreRatingStore, InMemoryRatingStore

SERVICE_ACCOUNT = {"type": "service_account", "project_id": "demo-project"}


class BackendLifecycleTests(unittest.TestCase):
    def setUp(self):
        dependencies.shutdown_backends()

    def tearDown(self):
        dependencies.shutdown_backends()

    def test_lifespan_builds_and_releases_in_memory_backends(self):
        settings = Settings(use_in_memory_backends=True, service_account_json=None)

        with TestClient(create_app(settings)) as client:
            self.assertIsInstance(dependencies._rating_store, InMemoryRatingStore)
            self.assertIsInstance(dependencies._identity_client, InMemoryIdentityClient)
            self.assertEqual(client.get("/api/ratings").status_code, 200)

        self.assertIsNone(dependencies._rating_store)
        self.assertIsNone(dependencies._identity_client)

    @patch("event_ratings.dependencies.firebase_admin.delete_app")
    @patch("event_ratings.dependencies.firestore.client")
    @patch("event_ratings.dependencies.firebase_admin.initialize_app")
    @patch("event_ratings.dependencies.credentials.Certificate")
    def test_lifespan_initializes_and_tears_down_firebase(
        self, mock_certificate, mock_initialize, mock_firestore_client, mock_delete
    ):
        settings = Settings(
            use_in_memory_backends=False,
            service_account_json=json.dumps(SERVICE_ACCOUNT),
        )
        firebase_app = mock_initialize.return_value
        firestore_client = mock_firestore_client.return_value

        with TestClient(create_app(settings)):
            mock_certificate.assert_called_once_with(SERVICE_ACCOUNT)
            mock_initialize.assert_called_once_with(mock_certificate.return_value)
            mock_firestore_client.assert_called_once_with(firebase_app)
            self.assertIsInstance(dependencies._rating_store, FirestoreRatingStore)
            self.assertIsInstance(dependencies._identity_client, FirebaseIdentityClient)
            firestore_client.close.assert_not_called()
            mock_delete.assert_not_called()

        firestore_client.close.assert_called_once_with()
        mock_delete.assert_called_once_with(firebase_app)
        self.assertIsNone(dependencies._rating_store)

    def test_lazy_backends_follow_app_settings(self):
        settings = Settings(use_in_memory_backends=True, service_account_json=None)
        client = TestClient(create_app(settings))

        with patch(
            "event_ratings.dependencies.get_settings",
            side_effect=AssertionError("environment settings consulted"),
        ):
            response = client.get("/api/ratings")

        self.assertEqual(response.status_code, 200)
        self.assertIsInstance(dependencies._rating_store, InMemoryRatingStore)


if __name__ == "__main__":
    unittest.main()
