"""
End-to-end parsing orchestration.
"""
from pathlib import Path
from typing import BinaryIO, List, Optional, Sequence, Union
import logging
import traceback

from .loader import PDFLoader, PageContent
from .detectors import DEFAULT_TEMPLATE, load_template
from .interpreter import reconstruct_text
from .extractor import StatementExtractor
from .errors import StructuralReadError, InterpreterError
from ..models.schema import Statement

logger = logging.getLogger(__name__)


class StatementParser:
    """Main parser class that orchestrates the entire parsing process."""

    def __init__(self, template_id: str = DEFAULT_TEMPLATE, verbose: bool = False,
                 templates_dir: Optional[Path] = None):
        self.template_id = template_id
        self.verbose = verbose

        # Load template
        self.template = load_template(template_id, templates_dir)

        if verbose:
            logging.basicConfig(level=logging.DEBUG)

    def parse(self, pdf_path: Union[Path, str, BinaryIO],
              holders: Sequence[str] = ()) -> Statement:
        """
        Parse a PDF file into a statement.

        Args:
            pdf_path: Path to PDF file, or an open binary file
            holders: Known account holder names to look for

        Returns:
            Statement object

        Raises:
            StructuralReadError: If the pages, streams or fonts cannot be read
            InterpreterError: If interpretation or extraction fails
        """
        source = str(getattr(pdf_path, 'name', pdf_path))
        loader = PDFLoader(pdf_path)
        try:
            try:
                pages = loader.load()
            except Exception as e:
                raise StructuralReadError(
                    f"Failed to read document structure: {e}",
                    {"source": source},
                    context=traceback.format_exc(),
                ) from e

            if not pages:
                raise StructuralReadError("No pages found in PDF", {"source": source})

            return self.extract_pages(pages, holders, source=source)

        finally:
            loader.close()

    def extract_pages(self, pages: List[PageContent], holders: Sequence[str] = (),
                      source: str = "<pages>") -> Statement:
        """
        Interpret page content and extract the statement.

        Any failure is reported as an InterpreterError carrying the traceback;
        no partial statement is returned.

        Args:
            pages: Page contents in document order
            holders: Known account holder names to look for
            source: Name of the document, for error reports

        Returns:
            Statement object
        """
        phase = "interpret"
        try:
            fragments = reconstruct_text(pages)
            logger.debug(f"{source}: {len(fragments)} fragments from {len(pages)} pages")

            phase = "extract"
            statement = StatementExtractor(self.template, holders).extract(fragments)

        except Exception as e:
            logger.error(f"Failed to process {source} during {phase}: {e}")
            raise InterpreterError(
                f"Failed to process statement: {e}",
                {"source": source, "phase": phase},
                context=traceback.format_exc(),
            ) from e

        logger.info(f"Parsed {source}")
        return statement


def parse_statement(pdf_path: Union[Path, str, BinaryIO], holders: Sequence[str] = (),
                    template_id: str = DEFAULT_TEMPLATE, verbose: bool = False) -> Statement:
    """
    Parse a dividend statement PDF.

    Args:
        pdf_path: Path to PDF file
        holders: Known account holder names to look for
        template_id: Template ID to use
        verbose: Enable verbose logging

    Returns:
        Statement object
    """
    parser = StatementParser(template_id, verbose)
    return parser.parse(pdf_path, holders)
