from dataclasses import dataclass
from pathlib import Path

from docvault.generation.exceptions import GenerationError

_DEFAULT_PROMPT_DIR = Path(__file__).parent / "prompts"


def load_prompt_template(name: str, prompt_dir: Path | None = None) -> str:
    """Load a prompt template from a file.

    Args:
        name: Template file name, e.g. "summary_prompt.txt".
        prompt_dir: Directory holding the templates.
                    Defaults to the bundled prompts directory.

    Returns:
        The raw template string with placeholders.

    Raises:
        GenerationError: if the file cannot be read.
    """
    directory = prompt_dir if prompt_dir is not None else _DEFAULT_PROMPT_DIR
    try:
        return (directory / name).read_text(encoding="utf-8")
    except OSError as exc:
        raise GenerationError(f"Failed to load prompt template {name}: {exc}") from exc


@dataclass(frozen=True)
class PromptTemplates:
    summary: str
    summary_truncated: str
    markdown: str
    markdown_chunk: str

    @classmethod
    def load(cls, prompt_dir: Path | None = None) -> "PromptTemplates":
        return cls(
            summary=load_prompt_template("summary_prompt.txt", prompt_dir),
            summary_truncated=load_prompt_template("summary_truncated_prompt.txt", prompt_dir),
            markdown=load_prompt_template("markdown_prompt.txt", prompt_dir),
            markdown_chunk=load_prompt_template("markdown_chunk_prompt.txt", prompt_dir),
        )
