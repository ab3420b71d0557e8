"""Per-file encoding decisions."""

from reencoder.policy.planner import EncodePlan, parse_framerate, plan_encode

__all__ = ["EncodePlan", "parse_framerate", "plan_encode"]
