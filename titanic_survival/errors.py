"""
Typed failures raised by the pipeline stages.
"""


class PipelineError(Exception):
    """Base class for every pipeline failure."""


class ConfigurationError(PipelineError):
    """The YAML profile is malformed or carries invalid settings."""


class DataFormatError(PipelineError):
    """Input data cannot be parsed or holds values outside the expected domain."""


class SchemaMismatchError(PipelineError):
    """A table does not carry the columns a stage expects."""


class ImputationPostconditionError(PipelineError):
    """Imputation left missing values behind or returned a misaligned matrix."""


class ModelFitError(PipelineError):
    """The underlying learner failed during cross-validation or refitting."""
