"""Rebuilds timed sentences from a flat stream of word timestamps."""

import logging
import re
from typing import List, Optional, Sequence

from .models import Sentence, Word
from .syllables import count_syllables

logger = logging.getLogger(__name__)

DEFAULT_BUFFER_PER_SYLLABLE = 0.1 # seconds added to a sentence end per syllable of its last word

# A run of non-terminators followed by any terminators.
_SENTENCE_RE = re.compile(r"[^.!?]+[.!?]*")
_ALPHA_RE = re.compile(r"[A-Za-z]")

def split_sentence_texts(transcript: str) -> List[str]:
    """
    Splits a transcript into trimmed candidate sentence strings.

    Candidates that are empty after trimming are discarded.
    """
    candidates = []
    for match in _SENTENCE_RE.finditer(transcript):
        text = match.group(0).strip()
        if text:
            candidates.append(text)
    return candidates

def last_alphabetic_token(tokens: Sequence[str]) -> Optional[str]:
    """Returns the last token containing at least one letter, or None."""
    for token in reversed(tokens):
        if _ALPHA_RE.search(token):
            return token
    return None

class SentenceBuilder:
    """
    Segments a transcript into sentences and aligns them to word timings.

    Sentence boundaries come from the transcript text, not from per-word
    punctuation flags. Each candidate sentence is then bound positionally to
    the next run of words with the same token count. The end of every
    sentence is pushed back by a buffer proportional to the syllable count of
    its last word, so trailing sounds the provider cut short stay audible.
    """

    def __init__(self, buffer_per_syllable: float = DEFAULT_BUFFER_PER_SYLLABLE, include_trailing_words: bool = False):
        """
        Initializes the SentenceBuilder.

        Args:
            buffer_per_syllable: Seconds of trailing buffer per syllable of a
                                 sentence's last alphabetic word.
            include_trailing_words: If True, words left over once the sentence
                                    texts are used up become one final sentence.
                                    If False they are dropped.
        """
        if buffer_per_syllable < 0:
            raise ValueError(f"buffer_per_syllable must be non-negative, got {buffer_per_syllable}")
        self.buffer_per_syllable = buffer_per_syllable
        self.include_trailing_words = include_trailing_words

    def build(self, words: Sequence[Word]) -> List[Sentence]:
        """
        Builds the ordered sentence list for a global word sequence.

        Args:
            words: All recognized words, flattened in provider order.

        Returns:
            Sentences covering contiguous, increasing word ranges. Empty if
            there are no words.
        """
        if not words:
            logger.info("No words to segment; returning no sentences.")
            return []

        transcript = " ".join(word.text for word in words)
        candidates = split_sentence_texts(transcript)
        logger.debug(f"Transcript split into {len(candidates)} candidate sentences.")

        sentences: List[Sentence] = []
        cursor = 0
        last_index = len(words) - 1
        for text in candidates:
            if cursor > last_index:
                logger.warning(f"Ran out of words with {len(candidates) - len(sentences)} sentence text(s) left; dropping the rest.")
                break
            tokens = text.split()
            last = min(cursor + len(tokens) - 1, last_index)
            sentences.append(self._make_sentence(len(sentences) + 1, text, tokens, words, cursor, last))
            cursor += len(tokens)

        if cursor <= last_index:
            leftover = words[cursor:]
            if self.include_trailing_words:
                text = " ".join(word.text for word in leftover).strip()
                tokens = text.split()
                logger.info(f"Emitting final sentence for {len(leftover)} leftover word(s).")
                sentences.append(self._make_sentence(len(sentences) + 1, text, tokens, words, cursor, last_index))
            else:
                logger.warning(f"Dropping {len(leftover)} word(s) not covered by any sentence text.")

        logger.info(f"Built {len(sentences)} sentences from {len(words)} words.")
        return sentences

    def _make_sentence(
        self,
        ordinal: int,
        text: str,
        tokens: List[str],
        words: Sequence[Word],
        first: int,
        last: int,
    ) -> Sentence:
        """Binds one sentence text to the inclusive word range first..last."""
        start_time = words[first].start_offset
        raw_end = words[last].end_offset

        buffer = 0.0
        buffer_word = last_alphabetic_token(tokens)
        if buffer_word is not None:
            buffer = count_syllables(buffer_word) * self.buffer_per_syllable

        end_time = max(raw_end + buffer, start_time)
        logger.debug(f"Sentence {ordinal}: words {first}-{last}, {start_time:.3f}s-{end_time:.3f}s (buffer {buffer:.2f}s)")
        return Sentence(
            ordinal=ordinal,
            text=text,
            start_time=start_time,
            end_time=end_time,
            first_word_index=first,
            last_word_index=last,
            buffer=buffer,
        )
