"""Exception hierarchy for template generation."""


class PropBuilderError(Exception):
    """Base class for every error raised by propbuilder."""


class ValidationError(PropBuilderError):
    """The ObjectSpec is missing inputs its category requires."""

    def __init__(self, errors):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "invalid object spec")


class PlanError(PropBuilderError):
    """LOD bands could not be derived from the given geometry."""


class ResolutionFailure(PropBuilderError):
    """A texture or shader could not be resolved.

    Always recovered locally by substituting a fallback material.
    """


class StoreError(PropBuilderError):
    """A template artifact could not be persisted."""

    def __init__(self, artifact: str, path: str, reason: str):
        self.artifact = artifact
        self.path = path
        super().__init__(f"Failed to save {artifact} at path: {path} ({reason})")


class GenerationError(PropBuilderError):
    """A generation stage failed after validation passed."""

    def __init__(self, stage: str, target_path: str, cause: Exception):
        self.stage = stage
        self.target_path = target_path
        self.cause = cause
        super().__init__(f"{stage} failed for {target_path}: {cause}")
