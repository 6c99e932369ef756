"""
Text reconstruction for flattened page text.

Flat text extraction drops the boundaries between block elements, so a
list like

    <li>cold sores</li><li>genital herpes</li><li>eye infections</li>

comes back as "cold soresgenital herpeseye infections". The pipeline puts
the boundaries back with a fixed chain of deterministic rewrites:

    1. normalise     NBSP, en dash, em dash -> space
    2. boundaries    "end.Next" "wordWord" "dose5" "5Tablets" "note:take"
    3. dictionary    "soresgenital" -> "sores genital"
    4. literal fixes hand-curated mis-joins seen on the site
    5. whitespace    collapse and trim

Paragraph bodies and summaries additionally get the grammar post-pass
(enhance()), which adds missing sentence periods, commas before
conjunctive adverbs and two contractions.
"""

import re
from pathlib import Path
from typing import FrozenSet, Iterable, Optional, Union

from .logger import get_logger

log = get_logger('text')

# Anatomical/medical words that commonly start the second half of a mis-join
LEAD_WORDS = (
    'cold', 'genital', 'eye', 'skin', 'oral', 'nasal', 'ear', 'hand',
    'foot', 'back', 'chest', 'head', 'neck', 'arm', 'leg',
)

# Applied in order, after the dictionary split
KNOWN_FIXES = (
    ('cold soresgenital herpeseye infections', 'cold sores genital herpes eye infections'),
    ('cold soresgenital herpes', 'cold sores genital herpes'),
    ('genital herpeseye infections', 'genital herpes eye infections'),
    ('medicinehave', 'medicine have'),
    ('y ears', 'years'),
    ('oldare', 'old are'),
    ('problemsare', 'problems are'),
)

# Used when the word list file cannot be read
FALLBACK_WORDS = frozenset("""
    about above after again along among around before below between during
    except inside outside through under within without
    could would should might shall ought cannot
    years months weeks days hours minutes seconds times places things people
    children women men adults patients doctors nurses
    medicine medicines tablets tablet liquid cream ointment injection
    injections drops spray sprays capsules capsule
    problems problem issues issue conditions condition diseases disease
    symptoms symptom effects effect reactions reaction
    pregnant pregnancy breastfeeding breastfeed fertility fertile conception
    contraception contraceptive contraceptives
    allergic allergy allergies sensitive sensitivity intolerance intolerant
    kidney liver heart lung lungs brain blood skin bone bones muscle muscles
    joint joints transplant transplants
""".split())

MIN_SPLIT_LENGTH = 3

# Real compounds start or end with these, e.g. "overdoses", "somewhat",
# "painless", "beforehand". A split with one of them as the left or right
# fragment is rejected.
COMPOUND_PREFIXES = frozenset((
    'over', 'under', 'some', 'any', 'every', 'there', 'here', 'where',
    'what', 'when', 'mean', 'before', 'after', 'with', 'out',
))
COMPOUND_SUFFIXES = frozenset((
    'less', 'ness', 'ful', 'after', 'time', 'times', 'what', 'hand', 'how',
    'ever', 'self', 'wise', 'ward', 'wards', 'where', 'thing', 'one', 'body',
    'fore', 'more', 'over', 'out', 'side', 'ship', 'hood', 'able',
))

_WORD = re.compile(r'[A-Za-z][a-z]+')
_WHITESPACE = re.compile(r'\s+')

_BOUNDARIES = (
    (re.compile(r'([.!?:])([A-Z])'), r'\1 \2'),
    (re.compile(r'([a-z])([A-Z])'), r'\1 \2'),
    (re.compile(r'([a-z])(\d)'), r'\1 \2'),
    (re.compile(r'(\d)([A-Z])'), r'\1 \2'),
    (re.compile(r':([a-z])'), r': \1'),
)

_MISSING_PERIOD = re.compile(r'([a-z])\s+([A-Z][a-z])')
_CONJUNCTION = re.compile(r'([a-z])\s+(but|however|therefore|moreover|furthermore)\s+([a-z])')
_ITS = re.compile(r'\bits\s+([a-z])')
_YOU_AUX = re.compile(r'\byou\s+(are|have|can|should|will|may)\b')


def parse_word_list(content: str) -> FrozenSet[str]:
    """Words from a word list file: whitespace separated, '#' starts a comment word."""
    words = set()
    for word in content.split():
        word = word.strip().lower()
        if word and not word.startswith('#') and len(word) > 2:
            words.add(word)
    return frozenset(words)


def load_dictionary(path: Optional[Union[str, Path]]) -> FrozenSet[str]:
    """
    Load the word dictionary once at start-up.

    Falls back to FALLBACK_WORDS (with a warning) when the file is missing
    or unreadable, so repair still runs with reduced recall.
    """
    if path:
        try:
            words = parse_word_list(Path(path).read_text(encoding='utf-8'))
            log.info(f"Loaded {len(words)} words for text reconstruction")
            return words
        except OSError as e:
            log.warning(f"Could not load word list {path}: {e}. Using fallback vocabulary")
    else:
        log.warning("No word list configured. Using fallback vocabulary")
    return FALLBACK_WORDS


class TextReconstructionPipeline:
    """
    The one text repair chain used by every extraction call site.

    Args:
        dictionary: Known words (lower case). Defaults to FALLBACK_WORDS.
        lead_words: Prefixes that mark the start of a run-together word.
    """

    def __init__(self, dictionary: Optional[Iterable[str]] = None, lead_words: Iterable[str] = LEAD_WORDS):
        self.dictionary = frozenset(w.lower() for w in (dictionary if dictionary is not None else FALLBACK_WORDS))
        self.lead_words = tuple(lead_words)

    @classmethod
    def from_word_list(cls, path: Optional[Union[str, Path]]) -> 'TextReconstructionPipeline':
        return cls(load_dictionary(path))

    def reconstruct(self, text: Optional[str]) -> Optional[str]:
        """Steps 1-5. Correctly spaced text passes through unchanged."""
        if not text:
            return text

        text = text.replace('\u00a0', ' ').replace('\u2013', ' ').replace('\u2014', ' ')

        for pattern, replacement in _BOUNDARIES:
            text = pattern.sub(replacement, text)

        text = _WORD.sub(lambda m: self.split_word(m.group(0)), text)

        for bad, good in KNOWN_FIXES:
            text = text.replace(bad, good)

        return _WHITESPACE.sub(' ', text).strip()

    def enhance(self, text: Optional[str]) -> Optional[str]:
        """Grammar post-pass. Not idempotent."""
        if not text:
            return text

        text = _MISSING_PERIOD.sub(r'\1. \2', text)
        text = _CONJUNCTION.sub(r'\1, \2 \3', text)
        text = _ITS.sub(r"it's \1", text)
        text = _YOU_AUX.sub(r"you're \1", text)
        return _WHITESPACE.sub(' ', text).strip()

    def repair(self, text: Optional[str]) -> Optional[str]:
        """reconstruct() followed by enhance(), for bodies and summaries."""
        return self.enhance(self.reconstruct(text))

    def _splittable(self, left: str, right: str) -> bool:
        return left not in COMPOUND_PREFIXES and right not in COMPOUND_SUFFIXES

    def _starts_known_word(self, fragment: str) -> bool:
        lowered = fragment.lower()
        return lowered in self.dictionary or lowered.startswith(self.lead_words)

    def split_word(self, word: str) -> str:
        """
        Split a run-together word at the first point where the left part is
        a dictionary word and the right part is a dictionary word or starts
        with a lead word. Known words are never split, and neither are
        compounds built on COMPOUND_PREFIXES or COMPOUND_SUFFIXES.
        """
        lowered = word.lower()
        if len(word) < MIN_SPLIT_LENGTH + 1 or lowered in self.dictionary:
            return word

        for i in range(MIN_SPLIT_LENGTH, len(word) - MIN_SPLIT_LENGTH + 1):
            left, right = word[:i], word[i:]
            if not self._splittable(lowered[:i], lowered[i:]):
                continue
            if lowered[:i] in self.dictionary and self._starts_known_word(right):
                return f"{left} {self.split_word(right)}"
        return word
