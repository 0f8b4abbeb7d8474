"""
Event ratings backend.

A FastAPI service that authenticates users through Firebase Authentication,
stores rating records in Cloud Firestore, and serves the single-page app's
static build.
"""
