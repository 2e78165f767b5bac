"""
High-level use cases for the Tapcard service.

Each service module orchestrates the remote profile API adapter and the pure
domain rules (compose a card, export a contact, check a username, edit a
template). Routers call these services instead of touching the adapter or the
domain modules directly.
"""
