"""HTTP layer: JSON-RPC dispatch, A2A routes and the application factory.

The application itself lives in :mod:`agentrelay.api.app`; it is not
re-exported here because the client side imports the JSON-RPC models from
this package.
"""
