"""
Pure domain rules for Tapcard: theme resolution, identifiers, social link
classification, pricing, vCard export, sharing and view-model composition.

Nothing in this package performs I/O; services orchestrate it with the remote
profile API.
"""
