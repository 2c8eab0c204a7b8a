"""BitTorrent HTTP tracker.

Clients announce themselves for an info hash and receive the other peers of
that swarm in return. See `herald.server` for the HTTP routes and
`herald.swarm` for the peer registry.
"""
