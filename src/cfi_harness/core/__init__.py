"""Core substrate: world, resolution, invocation, tasks and matching."""
