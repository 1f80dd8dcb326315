"""
indentation.py

Infer the indentation unit of a JSON document from its raw text.

Only "content" lines are sampled: blank lines and lines holding nothing but
closing brackets (optionally followed by a comma) carry no new indentation
information. Tab-indented lines are counted in tabs, space-indented lines in
spaces. Space samples are scored against a small set of candidate widths; when
no candidate explains most samples the most common raw width is used instead.
"""

import math
import re
from collections import Counter
from typing import List, Tuple

from logger import logger
from models import DEFAULT_INDENTATION, IndentationUnit

CANDIDATE_WIDTHS = (2, 3, 4, 5, 6, 8)
MIN_FIT_RATIO = 0.6

EXACT_SCORE = 10
NEAR_SCORE = 3
POOR_FIT_PENALTY = -2
CONSISTENCY_WEIGHT = 2

CLOSING_LINE = re.compile(r"^[\]}]*,?$")
LEADING_WHITESPACE = re.compile(r"^[ \t]*")


def nearest_level(sample: int, width: int) -> int:
    # round half up; Python's round() would send 2.5 to 2
    return math.floor(sample / width + 0.5)


def collect_samples(text: str) -> Tuple[List[int], List[int]]:
    """Return (tab_samples, space_samples) for the content lines of text."""
    tab_samples = []
    space_samples = []

    for line in text.split("\n"):
        trimmed = line.strip()
        if not trimmed or CLOSING_LINE.match(trimmed):
            continue

        leading = LEADING_WHITESPACE.match(line).group(0)
        if "\t" in leading:
            tab_samples.append(len(line) - len(line.lstrip("\t")))
        elif leading:
            space_samples.append(len(leading))

    return tab_samples, space_samples


def score_width(samples: List[int], width: int) -> int:
    score = 0
    levels = Counter()

    for sample in samples:
        level = nearest_level(sample, width)
        diff = abs(sample - level * width)
        if diff == 0:
            score += EXACT_SCORE
        elif diff <= 1:
            score += NEAR_SCORE
        elif diff > 2:
            score += POOR_FIT_PENALTY
        levels[level] += 1

    # a real indent ladder revisits the same levels over and over
    for occurrences in levels.values():
        if occurrences > 1:
            score += CONSISTENCY_WEIGHT * occurrences

    return score


def fit_ratio(samples: List[int], width: int) -> float:
    if not samples:
        return 0.0
    close = sum(
        1
        for sample in samples
        if abs(sample - nearest_level(sample, width) * width) <= 1
    )
    return close / len(samples)


def best_width(samples: List[int]) -> Tuple[int, int]:
    """Pick the best scoring candidate width.

    Candidates are tried in ascending order and the first best score wins,
    except that a candidate which is a multiple of the current best takes over
    on a tie: any sample a width explains exactly is also explained by its
    divisors, so 4-space documents would otherwise always come out as 2.

    Returns:
        tuple of (width, score)
    """
    best, best_score = CANDIDATE_WIDTHS[0], None

    for width in CANDIDATE_WIDTHS:
        score = score_width(samples, width)
        logger.debug(f"Indent width {width} scored {score}")
        if best_score is None or score > best_score:
            best, best_score = width, score
        elif score == best_score and width % best == 0:
            best = width

    return best, best_score


def most_common_sample(samples: List[int]) -> int:
    # Counter keeps insertion order, so ties go to the first value seen
    return Counter(samples).most_common(1)[0][0]


def detect_indentation(text: str) -> IndentationUnit:
    """Infer the indentation unit used by text. Never raises."""
    tab_samples, space_samples = collect_samples(text)

    if tab_samples and space_samples:
        # TODO: compare per-level consistency instead of a plain line vote
        if len(tab_samples) > len(space_samples):
            logger.debug(
                f"Mixed indentation, tabs win {len(tab_samples)} to {len(space_samples)}"
            )
            return IndentationUnit.tab()
    elif tab_samples:
        return IndentationUnit.tab()

    if not space_samples:
        return DEFAULT_INDENTATION

    width, score = best_width(space_samples)
    ratio = fit_ratio(space_samples, width)

    if ratio < MIN_FIT_RATIO and score > 0:
        mode = most_common_sample(space_samples)
        logger.debug(
            f"Width {width} fits only {ratio:.0%} of samples, using raw width {mode}"
        )
        return IndentationUnit.spaces(mode, fallback=True)

    return IndentationUnit.spaces(width)
