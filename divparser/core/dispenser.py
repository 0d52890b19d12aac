"""
Word, numeral and sentence dispenser over reconstructed page text.

A sentence is a run of fragments ending at the first fragment without a
trailing space (or at the last fragment). The dispenser keeps one cursor:
the index of the next fragment to read, the index of the fragment last
consumed, and whether a sentence is currently open.
"""
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple

from .normalize import parse_numeral


class Dispenser:
    """Dispenses words, numerals and sentences from a fragment sequence."""

    def __init__(self, fragments: Sequence[str]):
        self._fragments: List[str] = list(fragments)
        self._next_read = 0
        self._last_read = -1
        self._open = False

    @classmethod
    def from_sentence(cls, sentence: str) -> "Dispenser":
        """
        Build a dispenser over a single sentence of space-separated words.

        Args:
            sentence: Sentence text

        Returns:
            Dispenser whose fragments form exactly one sentence
        """
        words = sentence.split(' ')
        fragments = [word + ' ' for word in words[:-1]]
        fragments.append(words[-1])
        return cls(fragments)

    def __len__(self):
        return len(self._fragments)

    def __repr__(self):
        return (f"Dispenser(next_read={self._next_read}, last_read={self._last_read}, "
                f"open={self._open}, fragments={len(self._fragments)})")

    def _ends_sentence(self, index: int) -> bool:
        return not self._fragments[index].endswith(' ')

    def _closes(self, index: int) -> bool:
        return self._ends_sentence(index) or index == len(self._fragments) - 1

    def _sentence_end(self, index: int) -> int:
        last = len(self._fragments) - 1
        while index < last and not self._ends_sentence(index):
            index += 1
        return index

    def _sentence_start(self, index: int) -> int:
        while index > 0 and not self._ends_sentence(index - 1):
            index -= 1
        return index

    def _save(self) -> Tuple[int, int, bool]:
        return self._next_read, self._last_read, self._open

    def _restore(self, state: Tuple[int, int, bool]):
        self._next_read, self._last_read, self._open = state

    def _consume(self):
        if self._closes(self._next_read):
            self._open = False
        self._last_read = self._next_read
        self._next_read += 1

    @property
    def in_sentence(self) -> bool:
        """Whether a sentence is open."""
        return self._open

    def position(self) -> int:
        """Index of the next fragment to read."""
        return self._next_read

    def word(self) -> str:
        """The current (last consumed) word, trimmed."""
        if self._last_read < 0:
            return ""
        return self._fragments[self._last_read].strip()

    def previous_word(self) -> str:
        """The word before the current word, without moving."""
        return self.last_n_words(1)

    def last_n_words(self, n: int) -> str:
        """
        The n words before the current word, without moving.

        Args:
            n: Number of words to look back

        Returns:
            Words joined by single spaces, or "" if fewer than n precede
        """
        start = self._last_read - n
        if n < 1 or start < 0:
            return ""
        return ' '.join(fragment.strip() for fragment in self._fragments[start:self._last_read])

    def numeral(self) -> Optional[Decimal]:
        """Value of the current word, or None if it is not a numeral."""
        if self._last_read < 0:
            return None
        return parse_numeral(self._fragments[self._last_read])

    def next_word(self) -> bool:
        """
        Move onto the next word of the open sentence.

        Numerals are never dispensed as words; use next_numeral for them.

        Returns:
            False, without moving, at the end of the sentence or on a numeral
        """
        if self._next_read >= len(self._fragments) or not self._open:
            return False
        if parse_numeral(self._fragments[self._next_read]) is not None:
            return False

        self._consume()
        return True

    def next_numeral(self) -> bool:
        """
        Move onto the next word of the open sentence if it is a numeral.

        Returns:
            False, without moving, if the next word is not a numeral
        """
        if self._next_read >= len(self._fragments) or not self._open:
            return False
        if parse_numeral(self._fragments[self._next_read]) is None:
            return False

        self._consume()
        return True

    def jump_next_numeral(self) -> bool:
        """
        Skip words up to the next numeral in the open sentence.

        On success the cursor sits just before the numeral with the sentence
        open, so next_numeral() consumes it. Otherwise nothing moves.

        Returns:
            Whether a numeral remains in the sentence
        """
        state = self._save()
        while not self.at_end_of_sentence():
            if parse_numeral(self._fragments[self._next_read]) is not None:
                return True
            self.next_word()

        self._restore(state)
        return False

    def next_sentence(self) -> bool:
        """
        Open the next sentence.

        With no sentence open, the sentence at the cursor is opened in place.
        With one open, the rest of it is skipped.

        Returns:
            False once the fragments are exhausted
        """
        if self._next_read >= len(self._fragments):
            return False

        if not self._open:
            self._open = True
            return True

        self._next_read = self._sentence_end(self._next_read) + 1
        if self._next_read >= len(self._fragments):
            self._open = False
            return False
        return True

    def start_of_sentence(self):
        """Jump to the first word of the current sentence and reopen it."""
        if self._open and self._next_read < len(self._fragments):
            anchor = self._next_read
        else:
            # the sentence just finished is the current one
            anchor = self._next_read - 1

        self._next_read = self._sentence_start(anchor) if anchor > 0 else 0
        self._open = True

    def last_sentence(self) -> bool:
        """
        Jump to the first word of the sentence before the current one.

        Returns:
            False, leaving the cursor at the start of the first sentence, if
            there is no earlier sentence
        """
        self.start_of_sentence()
        if self._next_read == 0:
            return False

        self._next_read = self._sentence_start(self._next_read - 1)
        return True

    def dump_sentence(self) -> str:
        """
        Consume the rest of the open sentence, numerals included.

        Returns:
            Concatenated fragments, or "" if no sentence is open
        """
        if not self._open or self._next_read >= len(self._fragments):
            self._open = False
            return ""

        end = self._sentence_end(self._next_read)
        sentence = ''.join(self._fragments[self._next_read:end + 1])
        self._last_read = end
        self._next_read = end + 1
        self._open = False
        return sentence

    def dump_n_sentences(self, n: int) -> List[str]:
        """
        Read up to n sentences from the cursor without moving it.

        Args:
            n: Maximum number of sentences

        Returns:
            The sentences, the first being the rest of the open one
        """
        if n < 1:
            return []

        state = self._save()
        sentences = [self.dump_sentence()]
        for _ in range(n - 1):
            if not self.next_sentence():
                break
            sentences.append(self.dump_sentence())

        self._restore(state)
        return sentences

    def at_end_of_sentence(self) -> bool:
        """Whether no further word or numeral is available in the sentence."""
        return not self._open or self._next_read >= len(self._fragments)
