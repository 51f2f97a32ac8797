"""Step vocabularies and the catalogue that dispatches step text."""

from cfi_harness.steps.catalogue import (
    StepBinding,
    StepCatalogue,
    StepVocabulary,
    step_pattern,
)
from cfi_harness.steps.generic_steps import GenericSteps, generic_catalogue, quoted

__all__ = [
    "GenericSteps",
    "StepBinding",
    "StepCatalogue",
    "StepVocabulary",
    "generic_catalogue",
    "quoted",
    "step_pattern",
]
