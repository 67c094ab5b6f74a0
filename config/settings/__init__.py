"""Settings modules for GMoP.

``base`` holds everything shared; ``dev``, ``prod`` and ``test`` layer
their environment overrides on top of it.
"""
