"""Ephemeral batch types: render jobs and their outcomes."""

from dataclasses import dataclass, field
from typing import Optional
from uuid import uuid4

from shotlab.models.settings import FocalLength, PhotographyDevice, ViewAngle


@dataclass(frozen=True)
class RenderJob:
    """One discrete generation request within a batch.

    Created by the job expander, consumed once by the dispatcher, never persisted.
    """

    angle: ViewAngle
    device: PhotographyDevice
    lens: FocalLength
    variant_index: int = 0
    batch_seed: Optional[int] = None
    color_profile: str = ""
    id: str = field(default_factory=lambda: str(uuid4()))


@dataclass(frozen=True)
class TokenUsage:
    input_tokens: int = 0
    output_tokens: int = 0


@dataclass(frozen=True)
class GenerationResult:
    """Artifact returned by the generative backend for one job."""

    artifact_url: str
    usage: TokenUsage
    is_video: bool = False
    seed: Optional[int] = None


@dataclass(frozen=True)
class JobOutcome:
    """Terminal result of dispatching one job: a result or an error, never both."""

    job_id: str
    result: Optional[GenerationResult] = None
    error: Optional[BaseException] = None

    @property
    def succeeded(self) -> bool:
        return self.result is not None and self.error is None
