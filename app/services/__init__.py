"""Services package — all business logic lives here, never in routers.

Files:
  vehicle.py        — vehicle lifecycle, sibling updates, history, images, documents
  share.py          — share-token issuance and the public vehicle projection
  party.py          — customers and suppliers
  catalog.py        — vehicle makes and models
  order.py          — customer order intake
  analytics.py      — dashboard aggregates
  notifications.py  — notification envelopes and dispatch
  email.py          — status-change emails
  storage.py        — DigitalOcean Spaces object storage
  background.py     — detached post-commit tasks

Rule: routers call services, services call repositories, repositories call the DB.
      No SQLAlchemy queries in routers. No FastAPI imports in services.
"""
