"""Scenarios for value assertions, run on the generic steps."""

from pytest_bdd import scenarios

scenarios("features/assertions.feature")
