from abc import ABC, abstractmethod
from dataclasses import dataclass

from docvault.documents.models import Document
from docvault.generation.generator import GeneratedArtifacts


@dataclass(slots=True)
class PipelineContext:
    document_id: str
    document: Document | None = None
    raw_bytes: bytes = b""
    extracted_text: str = ""
    artifacts: GeneratedArtifacts | None = None
    error_message: str = ""


class PipelineStep(ABC):
    @abstractmethod
    def run(self, context: PipelineContext) -> PipelineContext:
        raise NotImplementedError
