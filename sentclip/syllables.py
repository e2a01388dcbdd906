"""Approximate English syllable counting used to size sentence end buffers."""

import re

_NON_ALPHA_RE = re.compile(r"[^a-z]")
# Silent endings: "-es"/"-e" after a consonant other than "l", or "-ed".
_SILENT_ENDING_RE = re.compile(r"(?:[^laeiouy]es|ed|[^laeiouy]e)$")
_LEADING_Y_RE = re.compile(r"^y")
_VOWEL_GROUP_RE = re.compile(r"[aeiouy]{1,2}")

def count_syllables(word: str) -> int:
    """
    Estimates the number of syllables in a word.

    The estimate is a vowel-group count, not a dictionary lookup: the word is
    lower-cased and reduced to its letters, a trailing silent ending and a
    leading "y" are removed, and the remaining runs of one or two vowels are
    counted. A word with no vowel groups left counts as one syllable.

    Args:
        word: The word to measure. Punctuation and digits are ignored.

    Returns:
        A positive syllable count.
    """
    letters = _NON_ALPHA_RE.sub("", word.lower())
    letters = _SILENT_ENDING_RE.sub("", letters)
    letters = _LEADING_Y_RE.sub("", letters)
    groups = _VOWEL_GROUP_RE.findall(letters)
    return len(groups) or 1
