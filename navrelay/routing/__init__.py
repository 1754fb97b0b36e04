"""navrelay routing — classifies bus envelopes and hands them to their sinks.

Two routers subscribe independently to the envelope bus: the live-push
router forwards creation envelopes to connected viewers through a push
transport, and the store-persistence router writes and deletes features
through the per-domain feature store adapters.
"""
