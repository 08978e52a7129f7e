"""HTTP routers for the tutoring API."""
