"""BonFire - workflow builder core: store, graph mutation, integration tests, executor."""

__version__ = "0.1.0"
