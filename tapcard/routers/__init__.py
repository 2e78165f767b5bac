"""
FastAPI routers grouped by domain (cards, templates, username, profile).

Each module exposes an APIRouter included by ``tapcard.app.create_app``.
Routers fetch their services from ``app.state`` and map service exceptions to
HTTP status codes.
"""
