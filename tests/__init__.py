"""Doc-Share test suite."""
