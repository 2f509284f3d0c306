"""Console output and logging setup for the ``ft`` command."""
