"""
Photon energy telemetry crawler.

Collects energy production and grid signal data from RTE open data services
(eco2mix daily files, EcoWatt signals), tags it per source, and delivers the
resulting points to sinks such as the console or an InfluxDB bucket.

CHANGELOG:
- 2026-10-16: Initial creation

TODO:
- None
"""
