"""
Procedural ambiance placement engine.

Resolves group/container settings, schedules sound-asset placements over a
time window and applies them to a timeline host.
"""

__all__ = [
    "structures",
    "resolver",
    "randomize",
    "intervals",
    "placement",
    "fanout",
    "crossfade",
    "host",
    "generation",
]
