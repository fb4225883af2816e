from docvault.config.settings import Settings
from docvault.extraction.base import BaseTextExtractor
from docvault.extraction.dispatcher import TextExtractionDispatcher
from docvault.extraction.docx_adapter import DocxAdapter
from docvault.extraction.pdfplumber_adapter import PdfPlumberAdapter
from docvault.extraction.plain_text_adapter import PlainTextAdapter
from docvault.extraction.pymupdf_adapter import PyMuPdfAdapter


class PdfExtractorFactory:
    """Creates the correct PDF extractor based on settings."""

    ADAPTERS: dict[str, type[BaseTextExtractor]] = {
        "pdfplumber": PdfPlumberAdapter,
        "pymupdf": PyMuPdfAdapter,
    }

    @classmethod
    def create(cls, settings: Settings) -> BaseTextExtractor:
        engine = settings.pdf_engine.lower()
        adapter_cls = cls.ADAPTERS.get(engine)
        if adapter_cls is None:
            raise ValueError(
                f"Unknown PDF engine '{engine}'. Choose from: {list(cls.ADAPTERS)}"
            )
        return adapter_cls()


def build_dispatcher(settings: Settings) -> TextExtractionDispatcher:
    return TextExtractionDispatcher(
        text_extractor=PlainTextAdapter(),
        pdf_extractor=PdfExtractorFactory.create(settings),
        word_extractor=DocxAdapter(),
    )
