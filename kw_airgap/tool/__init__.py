"""Command line tool for kw-airgap."""
