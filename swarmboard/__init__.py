"""swarmboard: shows which Swarm container served a request, plus a small message board."""

__version__ = "2.1.0"
