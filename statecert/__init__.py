"""
statecert - Certified State Verification

Authenticates replies from a replicated state machine that publishes its
state as signed, labeled hash trees:

- hashtree: node model, canonical digest, path lookup
- crypto: domain-separated hashing, root key, signature primitive, principals
- certificate: certificate model, signature verification, request status
- schemas: error taxonomy, canonical JSON, check results
- config / http: runtime configuration and the HTTP client
"""

__version__ = "0.1.0"
