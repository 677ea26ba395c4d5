"""L0 Data — static tables: package names, markers, timeouts."""
