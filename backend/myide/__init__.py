"""myide backend: codebase retrieval and staged generation for the MyIDE assistant."""

__version__ = "0.1.0"
