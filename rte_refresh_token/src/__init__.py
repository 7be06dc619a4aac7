"""
RTE OAuth token refresher.

Exchanges an RTE portal client id / secret for an access token and outputs
it to the console or stores it in a Kubernetes Secret, where the photon
EcoWatt source can read it.

CHANGELOG:
- 2026-10-16: Initial creation

TODO:
- None
"""
