"""
Error taxonomy for the progression engine and its collaborators.

External collaborator failures are never retried here; the prerequisite gate
turns them into its `error` state and waits for an explicit retry.
"""


class ProgressionError(Exception):
    """Base class for all engine errors."""


class ConfigurationError(ProgressionError):
    """Threshold table is missing a tier or holds an inconsistent entry."""


class CollaboratorError(ProgressionError):
    """An external collaborator (lookup, generation, grading) failed."""


class PrerequisiteLookupError(CollaboratorError, LookupError):
    """Prerequisites for a topic could not be fetched."""


class GenerationError(CollaboratorError):
    """Diagnostic question generation failed or produced nothing."""


class GradingError(CollaboratorError):
    """An answer could not be graded."""


class InvalidTransitionError(ProgressionError, ValueError):
    """A gate operation was attempted from a state that does not allow it."""


class GateBusyError(ProgressionError):
    """A gate already has an external call outstanding."""
