"""Summary and markdown generation over extracted document text."""

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass

from docvault.config.settings import Settings
from docvault.generation.chunking import split_into_chunks, truncate_for_summary
from docvault.generation.client_base import BaseGenerationClient
from docvault.generation.prompt_loader import PromptTemplates
from docvault.logging.logger import Log

SECTION_DELIMITER = "\n\n---\n\n"

SUMMARY_TRUNCATION_NOTICE = (
    "**Note:** Summary generated from the first {limit} of {total} characters.\n\n"
)

MARKDOWN_CAP_NOTICE = (
    "> **Note:** This document was very large. Showing markdown for the first "
    "{processed_chars:,} of {total:,} characters ({processed} of {total_chunks} sections).\n\n"
)


@dataclass(frozen=True)
class GenerationLimits:
    """Cost and size bounds applied to every pipeline run."""

    summary_char_limit: int = 150_000
    chunk_size: int = 80_000
    max_chunks: int = 20

    def __post_init__(self) -> None:
        for name in ("summary_char_limit", "chunk_size", "max_chunks"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be positive")

    @classmethod
    def from_settings(cls, settings: Settings) -> "GenerationLimits":
        return cls(
            summary_char_limit=settings.summary_char_limit,
            chunk_size=settings.chunk_size,
            max_chunks=settings.max_chunks,
        )


@dataclass(frozen=True)
class GeneratedArtifacts:
    summary: str
    markdown: str


class ArtifactGenerator:
    """Drives the generation client to produce a summary and a markdown rendering."""

    def __init__(
        self,
        *,
        client: BaseGenerationClient,
        limits: GenerationLimits | None = None,
        prompts: PromptTemplates | None = None,
    ) -> None:
        self._client = client
        self._limits = limits if limits is not None else GenerationLimits()
        self._prompts = prompts if prompts is not None else PromptTemplates.load()

    @property
    def limits(self) -> GenerationLimits:
        return self._limits

    def generate_artifacts(self, text: str) -> GeneratedArtifacts:
        """Run the summary and markdown branches concurrently and wait for both.

        Raises:
            Exception: the first branch failure, in completion order, once
                both branches have finished.
        """
        results: dict[str, str] = {}
        first_error: Exception | None = None
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="generate") as pool:
            futures = {
                pool.submit(self.generate_summary, text): "summary",
                pool.submit(self.generate_markdown, text): "markdown",
            }
            for future in as_completed(futures):
                branch = futures[future]
                try:
                    results[branch] = future.result()
                except Exception as exc:
                    Log.error(f"{branch} generation failed: {exc}")
                    if first_error is None:
                        first_error = exc

        if first_error is not None:
            raise first_error
        return GeneratedArtifacts(summary=results["summary"], markdown=results["markdown"])

    def generate_summary(self, text: str) -> str:
        limit = self._limits.summary_char_limit
        truncation = truncate_for_summary(text, limit)
        if not truncation.was_truncated:
            return self._client.generate(self._prompts.summary.format(text=text))

        Log.warning(
            f"Document exceeds {limit} chars ({truncation.total_chars}). "
            "Truncating for summary"
        )
        prompt = self._prompts.summary_truncated.format(
            total_chars=truncation.total_chars,
            limit=limit,
            text=truncation.text,
        )
        summary = self._client.generate(prompt)
        notice = SUMMARY_TRUNCATION_NOTICE.format(limit=limit, total=truncation.total_chars)
        return notice + summary

    def generate_markdown(self, text: str) -> str:
        chunk_size = self._limits.chunk_size
        if len(text) <= chunk_size:
            return self._client.generate(self._prompts.markdown.format(text=text))

        chunks = split_into_chunks(text, chunk_size)
        processed = min(len(chunks), self._limits.max_chunks)
        Log.info(f"Converting {len(text)} chars to markdown in {processed} chunks of {chunk_size}")
        if len(chunks) > processed:
            Log.warning(
                f"Document has {len(chunks)} chunks, limiting to {processed} "
                "to bound generation cost"
            )

        # Sequential, in order: bounds outbound load and keeps reassembly order.
        rendered: list[str] = []
        for index, chunk in enumerate(chunks[:processed], start=1):
            Log.debug(f"Converting chunk {index}/{processed}")
            prompt = self._prompts.markdown_chunk.format(
                part=index,
                total_parts=processed,
                text=chunk,
            )
            rendered.append(self._client.generate(prompt))

        markdown = SECTION_DELIMITER.join(rendered)
        if len(chunks) > processed:
            notice = MARKDOWN_CAP_NOTICE.format(
                processed_chars=processed * chunk_size,
                total=len(text),
                processed=processed,
                total_chunks=len(chunks),
            )
            return notice + markdown
        return markdown
