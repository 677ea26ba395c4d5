"""TianGong provisioner — environment bootstrap for the research toolkit."""

__version__ = "0.1.0"
