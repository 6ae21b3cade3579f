"""v1 router package — all /car-service/api/v1/* endpoints live here.

Files:
  vehicles.py   — vehicles, sibling updates, history, featured, images, documents
  makes.py      — vehicle makes and make logos
  models.py     — vehicle models
  customers.py  — customers (soft delete)
  suppliers.py  — suppliers (soft delete)
  orders.py     — customer orders
  analytics.py  — dashboard aggregates
  share.py      — share-link issuance and the public vehicle view

Rule: Routers only handle HTTP (request parsing, response shaping).
      All business logic delegates to app/services/.
"""
