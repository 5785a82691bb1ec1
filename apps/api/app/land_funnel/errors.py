from __future__ import annotations

from typing import List, Sequence


class LandFunnelError(Exception):
    """Base class for errors surfaced to the user as log lines."""


class WorkbookDecodeError(LandFunnelError):
    pass


class SchemaValidationError(LandFunnelError):
    def __init__(self, errors: Sequence[str]):
        self.errors: List[str] = list(errors)
        super().__init__("; ".join(self.errors) or "Schema validation failed.")


class PipelineInputError(LandFunnelError):
    pass


class EmptyStageError(LandFunnelError):
    pass
