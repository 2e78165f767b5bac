"""Tapcard: template composition and contact export for link-in-bio cards."""
