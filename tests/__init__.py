"""
pylsscsi Test Suite

Tests for the SCSI / NVMe lister.

Test Categories:
- unit/: Unit tests run against synthetic sysfs trees in temporary directories
- fixtures/: Sysfs tree builders and VPD page builders
"""
