"""
Heuristic statement extraction over reconstructed page text.

Statements print a label ("Franked Amount") and, somewhere after it, the
value. The extractor walks the text sentence by sentence, queues each label
it recognises and binds queued labels, oldest first, to the next numeral
that opens a later sentence.
"""
from collections import deque
from decimal import Decimal
from typing import Deque, Optional, Sequence
import logging

from .detectors import LabelDetector
from .dispenser import Dispenser
from .normalize import normalize_text, parse_statement_date
from ..models.schema import Statement, StatementTemplate

logger = logging.getLogger(__name__)


class StatementExtractor:
    """Extracts statement facts from a fragment sequence."""

    def __init__(self, template: StatementTemplate, holders: Sequence[str] = ()):
        self.template = template
        self.labels = LabelDetector(template.labels)
        self.holders = tuple(name for name in holders if name.strip())

    def extract(self, fragments: Sequence[str]) -> Statement:
        """
        Run the extraction pass over one document.

        Args:
            fragments: Reconstructed fragments of the whole document

        Returns:
            Statement with every fact that was found
        """
        dispenser = Dispenser(fragments)
        statement = Statement()
        pending: Deque[str] = deque()

        while dispenser.next_sentence():
            sentence = dispenser.dump_sentence()

            match = self.labels.match(sentence, statement, pending)
            if match:
                field, phrase = match
                logger.debug(f"Label '{phrase}' -> {field}")
                value = self._inline_numeral(sentence[len(phrase):])
                if value is not None:
                    self._bind(statement, field, value)
                else:
                    pending.append(field)
                continue

            # Layout can break one label over several sentences
            dispenser.start_of_sentence()
            lookahead = ' '.join(dispenser.dump_n_sentences(self.template.lookahead_sentences))

            match = self.labels.match(lookahead, statement, pending)
            if match:
                logger.debug(f"Label '{match[1]}' -> {match[0]} across sentences")
                pending.append(match[0])
                continue

            if not statement.account_holders:
                self._find_holders(lookahead, statement)

            self._find_other_data(sentence, dispenser, statement)

            if pending:
                value = self._leading_numeral(sentence)
                if value is not None:
                    self._bind(statement, pending.popleft(), value)

        if pending:
            logger.debug(f"Labels left without a value: {list(pending)}")
        return statement

    def _inline_numeral(self, rest: str) -> Optional[Decimal]:
        """Numeral printed directly after a label in the same sentence, as in "Franked Amount: $36.00"."""
        scratch = Dispenser.from_sentence(rest.strip().lstrip(':').strip())
        scratch.next_sentence()
        if not scratch.next_numeral():
            return None
        return scratch.numeral()

    def _leading_numeral(self, text: str) -> Optional[Decimal]:
        """First numeral of a sentence, if it sits inside the numeral window."""
        scratch = Dispenser.from_sentence(text.strip())
        scratch.next_sentence()
        if not scratch.jump_next_numeral() or not scratch.next_numeral():
            return None
        if scratch.position() >= self.template.numeral_window:
            return None
        return scratch.numeral()

    def _bind(self, statement: Statement, field: str, value: Decimal):
        logger.debug(f"Bound {field} = {value}")
        statement.bind(field, value)

    def _find_holders(self, text: str, statement: Statement):
        lowered = text.lower()
        for holder in self.holders:
            if holder.lower() in lowered:
                logger.debug(f"Found account holder: {holder}")
                statement.account_holders.append(holder)

    def _find_other_data(self, sentence: str, dispenser: Dispenser, statement: Statement):
        """
        Pick up the entity, instrument code and payment date.

        The dispenser sits at the start of the current sentence on entry and
        is returned there, open, so the caller's next_sentence() proceeds
        normally.
        """
        template = self.template

        if len(sentence) > len(template.entity_prefix) and sentence.startswith(template.entity_prefix):
            if dispenser.last_sentence():
                statement.entity = normalize_text(dispenser.dump_sentence())
                logger.debug(f"Entity: {statement.entity}")
                dispenser.next_sentence()

        prefix = template.code_prefix
        if len(sentence) > len(prefix) and sentence[:len(prefix)].lower() == prefix.lower():
            code = sentence[len(prefix):].strip().upper()
            if code:
                statement.asx_code = code

        lowered = sentence.lower()
        if any(trigger in lowered for trigger in template.date_triggers):
            if dispenser.next_sentence():
                text = dispenser.dump_sentence()
                payment_date = parse_statement_date(text, template.date_format)
                if payment_date:
                    statement.payment_date = payment_date
                dispenser.last_sentence()
